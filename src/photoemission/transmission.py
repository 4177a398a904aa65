"""
Photoemission — Transmission over the Surface Barrier
======================================================

Quantum transmission probability of an electron crossing the 1D potential
step at the cathode surface, written in terms of the *external*
perpendicular wavevector kz:

    s = sqrt(kV^2 + kz^2)         (internal wavevector)
    T(kz) = 4 s kz / (s + kz)^2

T is in (0, 1) for kz > 0, strictly increasing, T -> 0 as kz -> 0+ and
T -> 1 as kz -> infinity.  kz = 0 is the 0/0 limit and returns 0.

This function sits in the innermost loop of the velocity quadrature, so it
works on Python floats with the ``math`` module.
"""

from __future__ import annotations

import math

from .errors import DomainError


def transmission(kz: float, kv: float) -> float:
    """Transmission coefficient for external wavevector ``kz``.

    Parameters
    ----------
    kz : float
        Perpendicular wavevector outside the cathode [1/m], kz >= 0.
    kv : float
        Barrier wavevector sqrt(2 m W) / hbar [1/m].

    Returns
    -------
    T : float
        Transmission probability in [0, 1).
    """
    if kz < 0:
        raise DomainError(f"Perpendicular wavevector must be non-negative, got {kz!r}")
    if kz == 0:
        return 0.0
    s = math.sqrt(kv * kv + kz * kz)
    return 4.0 * s * kz / (s + kz) ** 2
