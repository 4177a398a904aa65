"""
Photoemission — Spatial Bins
=============================

For each time slice, freshly generated electrons are propagated to the end
of the simulation and deposited into spatial bins.  A bin stores, for every
slice, the number of electrons received and their average (arrival)
velocity: the velocity spread within one slice/bin pair is reduced to its
midpoint, so use enough bins for that approximation to hold.

Once all slices are placed, ``Bin.result()`` gives the total number of
electrons in the bin, their average momentum and their momentum
uncertainty.  The result is cached until the next ``add_slice``.
"""

from __future__ import annotations

import math
from typing import List, NamedTuple, Optional

from .constants import MASS
from .errors import DomainError


class Slice(NamedTuple):
    """Electrons of one time slice deposited in one bin."""
    count: float
    avg_velocity: float


class BinResult(NamedTuple):
    """Aggregate of all slices stored in a bin."""
    total_count: float
    avg_momentum: float
    momentum_uncertainty: float


_EMPTY_RESULT = BinResult(0.0, 0.0, 0.0)


class Bin:
    """Spatial interval [begin, end) accumulating slice contributions."""

    def __init__(self, begin: float, end: float):
        if not begin < end:
            raise DomainError(f"Bin requires begin < end, got [{begin!r}, {end!r})")
        self.begin = begin
        self.end = end
        self.slices: List[Slice] = []
        self._result: Optional[BinResult] = None

    def __repr__(self):
        return f"Bin({self.begin!r}, {self.end!r}, slices={len(self.slices)})"

    def add_slice(self, count: float, v_begin: float, v_end: float) -> None:
        """Store ``count`` electrons arriving with velocities in [v_begin, v_end].

        Adding a slice clears any cached result.
        """
        self.slices.append(Slice(count, (v_begin + v_end) / 2))
        self._result = None

    def result(self) -> BinResult:
        """Total count, average momentum and momentum uncertainty (cached)."""
        if self._result is None:
            self._result = self._compute_result()
        return self._result

    def _compute_result(self) -> BinResult:
        total = 0.0
        velocity_sum = 0.0
        velocity_sq_sum = 0.0
        for count, v_avg in self.slices:
            total += count
            velocity_sum += count * v_avg
            velocity_sq_sum += count * v_avg ** 2

        if total == 0:
            return _EMPTY_RESULT

        avg_momentum = MASS * velocity_sum / total
        # DeltaP^2 = <p^2> - <p>^2, abs() guards round-off below zero
        momentum_uncertainty = math.sqrt(
            abs(MASS ** 2 * velocity_sq_sum / total - avg_momentum ** 2))
        return BinResult(total, avg_momentum, momentum_uncertainty)
