"""
Photoemission — Longitudinal Electron Pulse Simulation
=======================================================

Simulates the longitudinal phase-space distribution of an electron pulse
photoemitted from a cathode by a gaussian laser pulse, and extracts the
initial conditions of the AG model (Michalik & Sipe) for electron-column
propagation codes.

Modules
-------
constants     : Physical constants (electron mass, charge, hbar, pi)
config        : Default parameters and output locations
errors        : Exception hierarchy
apparatus     : Experimental parameters and derived quantities
transmission  : Quantum transmission over the surface potential step
integrator    : Nested (theta, v) quadrature and velocity-window fractions
bins          : Spatial bins accumulating time-slice contributions
processing    : Peak scan, spread and weighted fit -> AG parameters
simulation    : Time-slice deposition engine (simulate / process / report)
pulse         : Analytic and simulated pulse generators for column codes
figures       : Summary figures (histogram + momentum correlation)

Usage
-----
    from photoemission import ApparatusParameters, PhotoemissionSimulation

    sim = PhotoemissionSimulation(ApparatusParameters(tau=100e-15))
    sim.simulate()
    sim.process()
    print(sim.report())

or from the command line:

    python -m photoemission --tau 100e-15 --num-space-bins 200
"""

from .apparatus import ApparatusParameters
from .bins import Bin, BinResult, Slice
from .config import SimulationConfig
from .errors import (
    DomainError,
    InsufficientDataError,
    IntegrationError,
    PhotoemissionError,
    SequenceError,
)
from .integrator import VelocityIntegrator, simple_fraction
from .processing import ResultSummary, fit_routine, process_bins
from .pulse import (
    AnalyticPulseGenerator,
    Pulse,
    PulseResult,
    SimulatedPulseGenerator,
    make_pulse_generator,
)
from .simulation import PhotoemissionSimulation, run_sim
from .transmission import transmission

__version__ = "1.0.0"

__all__ = [
    "ApparatusParameters",
    "AnalyticPulseGenerator",
    "Bin",
    "BinResult",
    "DomainError",
    "InsufficientDataError",
    "IntegrationError",
    "PhotoemissionError",
    "PhotoemissionSimulation",
    "Pulse",
    "PulseResult",
    "ResultSummary",
    "SequenceError",
    "SimulatedPulseGenerator",
    "SimulationConfig",
    "Slice",
    "VelocityIntegrator",
    "fit_routine",
    "make_pulse_generator",
    "process_bins",
    "run_sim",
    "simple_fraction",
    "transmission",
]
