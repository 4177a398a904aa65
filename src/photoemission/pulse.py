"""
Photoemission — Pulse Generators for Column Propagation
========================================================

Hand-off between the emission model and an electron-column propagation
code.  A generator turns apparatus parameters into a ``Pulse`` carrying the
AG-model initial conditions:

=========================  ==================================================
Generator                  Source of sigma_z, eta_z, gamma_z
=========================  ==================================================
AnalyticPulseGenerator     closed-form estimate, no simulation
SimulatedPulseGenerator    ``PhotoemissionSimulation`` simulate() / process()
=========================  ==================================================

The variant is chosen explicitly, e.g. ``make_pulse_generator('simulated',
num_space_bins=100, num_time_slices=100)``.

Emission time
-------------
The simulated emission elapses ``num_taus * tau`` before the pulse exists.
That offset is returned in ``PulseResult.emission_time`` so the host can
shift its time origin.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, replace
from typing import Optional

from .apparatus import ApparatusParameters
from .config import SimulationConfig
from .constants import MASS
from .errors import DomainError
from .processing import ResultSummary
from .simulation import PhotoemissionSimulation


@dataclass
class Pulse:
    """Longitudinal AG-model description of an electron pulse."""
    location: float       # [m]
    velocity: float       # [m/s]
    sigma_z: float        # [m^2]
    eta_z: float          # [(kg m/s)^2]
    gamma_z: float        # [kg m^3/s]
    number: float         # electrons


@dataclass(frozen=True)
class PulseResult:
    """A generated pulse plus the emission-time offset of its creation."""
    pulse: Pulse
    emission_time: float = 0.0
    summary: Optional[ResultSummary] = None


class AnalyticPulseGenerator:
    """Closed-form pulse estimate.

    Electrons leave with a uniform excess-energy spread in [0, Emax]:

        <v>     = (2/3) vmax
        sigma_z = (<v> tau)^2 / 2      (variance of a gaussian exp(-t^2/tau^2))
        eta_z   = m Emax / 9           (momentum variance of the spread)
        gamma_z = 0                    (no correlation at birth)
    """

    kind = 'analytic'

    def generate_pulse(self, apparatus: ApparatusParameters,
                       location: float = 0.0) -> PulseResult:
        velocity = 2.0 / 3.0 * apparatus.vmax
        pulse = Pulse(
            location=location,
            velocity=velocity,
            sigma_z=(velocity * apparatus.tau) ** 2 / 2,
            eta_z=MASS * apparatus.Emax / 9,
            gamma_z=0.0,
            number=apparatus.num_electrons,
        )
        return PulseResult(pulse=pulse, emission_time=0.0)


class SimulatedPulseGenerator:
    """Pulse from a full emission simulation.

    Parameters
    ----------
    config : SimulationConfig, optional
        Base settings (defaults if omitted).
    **overrides
        ``SimulationConfig`` fields replacing those of ``config``.
    """

    kind = 'simulated'

    def __init__(self, config: Optional[SimulationConfig] = None, **overrides):
        config = config if config is not None else SimulationConfig()
        self.config = replace(config, **overrides) if overrides else config

    def generate_pulse(self, apparatus: ApparatusParameters,
                       location: float = 0.0) -> PulseResult:
        print("Simulating pulse emission process", file=sys.stderr)

        sim = PhotoemissionSimulation(apparatus, self.config)
        sim.simulate()
        summary = sim.process()

        emission_time = sim.emission_time
        print(f"Note that the pulse was created at an effective time "
              f"{emission_time:e}s beyond the simulation begin time.",
              file=sys.stderr)

        pulse = Pulse(
            location=location + summary.x_peak,
            velocity=summary.v_peak,
            sigma_z=summary.sigma,
            eta_z=summary.eta,
            gamma_z=summary.gamma,
            number=apparatus.num_electrons,
        )
        return PulseResult(pulse=pulse, emission_time=emission_time,
                           summary=summary)


_GENERATORS = {
    AnalyticPulseGenerator.kind: AnalyticPulseGenerator,
    SimulatedPulseGenerator.kind: SimulatedPulseGenerator,
}


def make_pulse_generator(kind: str, **overrides):
    """Generator for ``kind`` in {'analytic', 'simulated'}.

    ``overrides`` are ``SimulationConfig`` fields and only apply to the
    simulated generator.
    """
    try:
        cls = _GENERATORS[kind]
    except KeyError:
        raise DomainError(f"Unknown pulse generator: {kind!r}. "
                          f"Use one of {sorted(_GENERATORS)}.") from None
    if cls is AnalyticPulseGenerator:
        if overrides:
            raise TypeError("AnalyticPulseGenerator takes no simulation overrides")
        return cls()
    return cls(**overrides)
