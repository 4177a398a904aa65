"""
Photoemission — Apparatus Parameters
=====================================

Holder for the experimental parameters of a photoemission run, together with
the physical quantities derived from them.

Unit convention
---------------
All quantities are SI (MKS) **except** the work function and the photon
energy, which are given in eV for convenience.  Emax converts to joules;
the barrier wavevector kV takes the work function in eV as given.

=============  ===========  =============================================
Attribute      Unit         Meaning
=============  ===========  =============================================
tau            s            HW1/eM temporal duration of the laser
num_electrons  --           total number of photoemitted electrons
work_function  eV           work function of the photocathode (Ta: 4.25)
photon_energy  eV           photon energy of the laser
dc_field       V/m          accelerating field strength in the gun
Emax           J            energy of an electron carrying the full excess
acc            m/s^2        acceleration of an electron in the field
vmax           m/s          velocity of an electron with energy Emax
kV             1/m          barrier wavevector sqrt(2 m W) / hbar, W in eV
=============  ===========  =============================================
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import cached_property

from .config import (
    DEFAULT_DC_FIELD,
    DEFAULT_NUM_ELECTRONS,
    DEFAULT_PHOTON_ENERGY,
    DEFAULT_TAU,
    DEFAULT_WORK_FUNCTION,
)
from .constants import CHARGE, HBAR, MASS
from .errors import DomainError


@dataclass(frozen=True)
class ApparatusParameters:
    """Experimental parameters and derived quantities (cached on first use)."""
    tau: float = DEFAULT_TAU
    num_electrons: float = DEFAULT_NUM_ELECTRONS
    work_function: float = DEFAULT_WORK_FUNCTION
    photon_energy: float = DEFAULT_PHOTON_ENERGY
    dc_field: float = DEFAULT_DC_FIELD

    def __post_init__(self):
        if not self.tau > 0:
            raise DomainError(f"Laser duration tau must be positive, got {self.tau!r}")
        if not self.num_electrons > 0:
            raise DomainError(
                f"num_electrons must be positive, got {self.num_electrons!r}")
        if not self.work_function > 0:
            raise DomainError(
                f"Work function must be positive, got {self.work_function!r} eV")
        if not self.photon_energy > self.work_function:
            raise DomainError(
                f"Photon energy ({self.photon_energy!r} eV) must exceed the "
                f"work function ({self.work_function!r} eV); no electron "
                f"would be emitted")

    @cached_property
    def Emax(self) -> float:
        """Maximum kinetic energy of a photoemitted electron [J]."""
        return CHARGE * (self.photon_energy - self.work_function)

    @cached_property
    def acc(self) -> float:
        """Acceleration of an electron due to the DC field [m/s^2]."""
        return CHARGE * self.dc_field / MASS

    @cached_property
    def vmax(self) -> float:
        """Velocity of an electron with ``Emax`` energy [m/s]."""
        return math.sqrt(2 * self.Emax / MASS)

    @cached_property
    def kV(self) -> float:
        """Wavevector ("momentum") of the surface barrier [1/m]."""
        return math.sqrt(2 * MASS * self.work_function) / HBAR

    def conditions(self) -> str:
        """Text block listing the user-defined conditions."""
        return (
            "### Conditions ###\n"
            f"tau = {self.tau}\n"
            f"num_electrons = {self.num_electrons}\n"
            f"WF = {self.work_function}\n"
            f"photon_energy = {self.photon_energy}\n"
            f"DC_field = {self.dc_field}\n"
        )
