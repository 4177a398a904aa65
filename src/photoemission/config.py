"""
Photoemission — Configuration
==============================

Default parameters of the simulation and the output locations.  Users can
override any of these through the ``ApparatusParameters`` /
``SimulationConfig`` constructors or the command-line options without
touching the engine code.

Output directory
----------------
Files (CSV records, figures) are written to ``PHOTOEMISSION_OUTPUT_DIR`` if
that environment variable is set, else to the current working directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import DomainError

# =============================================================================
# Apparatus defaults
# =============================================================================

DEFAULT_TAU: float = 10e-12            # [s]    HW1/eM laser duration
DEFAULT_NUM_ELECTRONS: float = 1e6     # [-]    electrons in the pulse
DEFAULT_WORK_FUNCTION: float = 4.25    # [eV]   Ta photocathode
DEFAULT_PHOTON_ENERGY: float = 4.75    # [eV]
DEFAULT_DC_FIELD: float = 1e6          # [V/m]  accelerating field

# =============================================================================
# Discretisation / quadrature defaults
# =============================================================================

DEFAULT_NUM_SPACE_BINS: int = 1000
DEFAULT_NUM_TIME_SLICES: int = 1000
DEFAULT_NUM_TAUS: float = 6            # simulated duration in units of tau
DEFAULT_EPSREL: float = 0.0
DEFAULT_EPSABS: float = 1e-6

# Tolerated mismatch between allocated and requested electrons before a
# warning is issued at the end of simulate()
ALLOCATION_TOLERANCE: float = 0.01

# =============================================================================
# Output
# =============================================================================

OUTPUT_DIR_ENV: str = 'PHOTOEMISSION_OUTPUT_DIR'
DEFAULT_OUTPUT_FILENAME: str = 'output.csv'
SUMMARY_FIGURE_FILENAME: str = 'photoemission_summary.png'

CSV_HEADER: str = ('"bin position","number of electrons",'
                   '"bin average momentum","bin momentum uncertainty"')


def output_dir() -> str:
    """Directory receiving CSV records and figures."""
    return os.environ.get(OUTPUT_DIR_ENV, os.getcwd())


@dataclass(frozen=True)
class SimulationConfig:
    """Discretisation and numerical settings of a simulation run.

    Attributes
    ----------
    num_space_bins : number of spatial bins spanning [0, dmax)
    num_time_slices : number of emission time slices
    num_taus : simulated duration in units of the laser duration tau
    simple : use the closed-form (v/vmax)^5 velocity distribution instead of
             the transmission-weighted integral
    epsrel, epsabs : quadrature tolerances
    verbose : print progress and allocation summaries
    """
    num_space_bins: int = DEFAULT_NUM_SPACE_BINS
    num_time_slices: int = DEFAULT_NUM_TIME_SLICES
    num_taus: float = DEFAULT_NUM_TAUS
    simple: bool = False
    epsrel: float = DEFAULT_EPSREL
    epsabs: float = DEFAULT_EPSABS
    verbose: bool = False

    def __post_init__(self):
        for name in ('num_space_bins', 'num_time_slices'):
            value = getattr(self, name)
            if int(value) != value or value <= 0:
                raise DomainError(f"{name} must be a positive integer, got {value!r}")
            object.__setattr__(self, name, int(value))
        if self.num_taus <= 0:
            raise DomainError(f"num_taus must be positive, got {self.num_taus!r}")
        if self.epsabs < 0 or self.epsrel < 0:
            raise DomainError("Quadrature tolerances must be non-negative "
                              f"(epsabs={self.epsabs!r}, epsrel={self.epsrel!r})")
        if self.epsabs == 0 and self.epsrel == 0:
            raise DomainError("At least one of epsabs / epsrel must be positive")
