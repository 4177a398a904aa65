"""
Photoemission — Time-Slice Deposition Engine
=============================================

Models the initial longitudinal distribution of electrons photogenerated
by a gaussian laser pulse.  The emission is cut into ``num_time_slices``
slices spanning ``end_time = num_taus * tau``; each slice releases the
electrons emitted during it (gaussian cumulative profile centred at
end_time / 2), which then propagate under the constant gun acceleration
until ``end_time``.  The velocity window that maps onto each spatial bin is
obtained by inverting

    x = vi t + acc t^2 / 2    ->    vi(x) = x / t - acc t / 2

and the fraction of the slice emitted with those speeds is taken from the
velocity distribution (transmission-weighted integral, or the closed-form
(v/vmax)^5 model in ``simple`` mode).  Electrons reach x with

    vf(x) = sqrt(vi(x)^2 + 2 acc x).

Usage
-----
    sim = PhotoemissionSimulation(ApparatusParameters(tau=100e-15),
                                  SimulationConfig(num_space_bins=200,
                                                   num_time_slices=200))
    sim.simulate()          # 1. deposit slices into bins
    sim.process()           # 2. AG-model parameters (ResultSummary)
    sim.write_csv()         # per-bin records
    print(sim.report())

The phases must run in this order; ``process()`` before ``simulate()``
raises ``SequenceError``.  Calling ``simulate()`` again starts from fresh
bins.

Cost: in physical mode every overlapping (slice, bin) pair costs one nested
quadrature, O(num_time_slices x num_space_bins) in total.  ``simple`` mode
is O(1) per pair and serves as a cheap validation path.
"""

from __future__ import annotations

import os
import warnings
from dataclasses import fields
from functools import cached_property
from typing import List, Optional

import numpy as np
from numpy.typing import NDArray
from scipy.special import erf

from .apparatus import ApparatusParameters
from .bins import Bin
from .config import (
    ALLOCATION_TOLERANCE,
    CSV_HEADER,
    DEFAULT_OUTPUT_FILENAME,
    SimulationConfig,
    output_dir,
)
from .errors import DomainError, SequenceError
from .integrator import VelocityIntegrator, simple_fraction
from .processing import ResultSummary, process_bins

_APPARATUS_FIELDS = frozenset(f.name for f in fields(ApparatusParameters))
_CONFIG_FIELDS = frozenset(f.name for f in fields(SimulationConfig))


class PhotoemissionSimulation:
    """Simulation of one photoemitted electron pulse.

    Parameters
    ----------
    apparatus : ApparatusParameters, optional
        Experimental parameters (defaults if omitted).
    config : SimulationConfig, optional
        Discretisation and quadrature settings (defaults if omitted).
    """

    def __init__(self, apparatus: Optional[ApparatusParameters] = None,
                 config: Optional[SimulationConfig] = None):
        self.apparatus = apparatus if apparatus is not None else ApparatusParameters()
        self.config = config if config is not None else SimulationConfig()
        self.bins: List[Bin] = []
        self._edges: NDArray = np.zeros(0)
        self.total: float = 0.0
        self._simulated = False
        self._summary: Optional[ResultSummary] = None
        if not self.dmax > 0:
            raise DomainError(
                f"No electron can leave the cathode: dmax = {self.dmax:.3e} m "
                f"(dc_field = {self.apparatus.dc_field:.3e} V/m retards the pulse "
                f"over {self.config.num_taus} taus)")

    @classmethod
    def from_options(cls, **options) -> 'PhotoemissionSimulation':
        """Build from flat keyword options (apparatus and config fields mixed)."""
        unknown = set(options) - _APPARATUS_FIELDS - _CONFIG_FIELDS
        if unknown:
            raise TypeError(f"Unknown simulation option(s): {', '.join(sorted(unknown))}")
        apparatus = ApparatusParameters(
            **{k: v for k, v in options.items() if k in _APPARATUS_FIELDS})
        config = SimulationConfig(
            **{k: v for k, v in options.items() if k in _CONFIG_FIELDS})
        return cls(apparatus, config)

    # ------------------------------------------------------------------
    # Derived quantities
    # ------------------------------------------------------------------

    @property
    def end_time(self) -> float:
        """Simulated duration num_taus * tau [s]."""
        return self.config.num_taus * self.apparatus.tau

    @property
    def emission_time(self) -> float:
        """Time elapsed during emission, to offset a host simulation clock [s]."""
        return self.end_time

    @property
    def dmax(self) -> float:
        """Furthest reachable position at end_time [m]."""
        t = self.end_time
        return self.apparatus.vmax * t + self.apparatus.acc * t ** 2 / 2

    @property
    def binwidth(self) -> float:
        return self.dmax / self.config.num_space_bins

    @property
    def slice_duration(self) -> float:
        return self.end_time / self.config.num_time_slices

    @cached_property
    def integrator(self) -> VelocityIntegrator:
        return VelocityIntegrator.for_apparatus(
            self.apparatus, epsabs=self.config.epsabs, epsrel=self.config.epsrel)

    @property
    def vnorm(self) -> float:
        """Normalisation of the velocity distribution (physical mode)."""
        return self.integrator.vnorm

    @property
    def summary(self) -> ResultSummary:
        if self._summary is None:
            raise SequenceError("No results yet: call simulate() and process() first")
        return self._summary

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def _build_bins(self) -> List[Bin]:
        self._edges = np.linspace(0.0, self.dmax, self.config.num_space_bins + 1)
        return [Bin(float(lo), float(hi))
                for lo, hi in zip(self._edges[:-1], self._edges[1:])]

    def slice_counts(self) -> NDArray:
        """Electrons emitted in each time slice.

        Difference of the gaussian cumulative emission
        N (erf((t - num_taus tau / 2) / tau) + 1) / 2 at consecutive slice
        start times; the first slice also carries the tail emitted before t=0.
        """
        tau = self.apparatus.tau
        elapsed = np.arange(self.config.num_time_slices) * self.slice_duration
        cumulative = self.apparatus.num_electrons * (
            erf((elapsed - self.config.num_taus * tau / 2) / tau) + 1) / 2
        return np.diff(cumulative, prepend=0.0)

    def number_by_velocity(self, vi_begin: NDArray, vi_end: NDArray) -> NDArray:
        """Fraction of a slice emitted with speeds in each [vi_begin, vi_end].

        Windows are clamped to [0, vmax]; windows entirely outside get 0.
        """
        vmax = self.apparatus.vmax
        v_1 = np.maximum(vi_begin, 0.0)
        v_2 = np.minimum(vi_end, vmax)
        overlap = ~((vi_begin > vmax) | (vi_end < 0))

        fractions = np.zeros(len(vi_begin))
        if self.config.simple:
            fractions[overlap] = simple_fraction(v_1[overlap], v_2[overlap], vmax)
        else:
            for i in np.flatnonzero(overlap):
                fractions[i] = self.integrator.normalized_fraction(
                    float(v_1[i]), float(v_2[i]))
        return fractions

    def propagate_slice(self, num_in_slice: float, propagation_time: float) -> float:
        """Deposit one slice into every bin; returns the electrons allocated."""
        acc = self.apparatus.acc
        t = propagation_time
        edges = self._edges

        # initial velocities reaching the bin edges, and arrival velocities there
        vi = edges / t - acc * t / 2
        vf = np.sqrt(vi ** 2 + 2 * acc * edges)

        counts = num_in_slice * self.number_by_velocity(vi[:-1], vi[1:])
        for b, num, vf_begin, vf_end in zip(self.bins, counts, vf[:-1], vf[1:]):
            b.add_slice(float(num), float(vf_begin), float(vf_end))
        return float(counts.sum())

    def simulate(self) -> float:
        """Run the time-slice loop; returns the total number of electrons allocated."""
        cfg = self.config
        self.bins = self._build_bins()
        self.total = 0.0
        self._summary = None

        n_slices = cfg.num_time_slices
        report_every = max(1, n_slices // 10)
        if cfg.verbose:
            mode = 'simple (v/vmax)^5' if cfg.simple else 'transmission-weighted'
            print(f"Simulating {n_slices} time slices x {cfg.num_space_bins} "
                  f"spatial bins ({mode} velocity distribution)")

        for j, num_in_slice in enumerate(self.slice_counts()):
            elapsed_time = j * self.slice_duration
            propagation_time = self.end_time - elapsed_time
            self.total += self.propagate_slice(num_in_slice, propagation_time)

            if cfg.verbose and ((j + 1) % report_every == 0 or j + 1 == n_slices):
                print(f"  slice {j + 1:>6d}/{n_slices}  "
                      f"({100.0 * (j + 1) / n_slices:5.1f}%)")

        self._simulated = True

        num_electrons = self.apparatus.num_electrons
        percent = self.total / num_electrons * 100
        if cfg.verbose:
            print(f"Allocated a total of {self.total:.6g} electrons ({percent:.3f}%)")
        if abs(self.total / num_electrons - 1) > ALLOCATION_TOLERANCE:
            warnings.warn(
                f"Only {percent:.2f}% of the electrons were allocated to bins; "
                f"increase num_space_bins / num_time_slices.",
                RuntimeWarning,
                stacklevel=2,
            )
        return self.total

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    def process(self) -> ResultSummary:
        """Extract the AG-model parameters from the filled bins."""
        if not self._simulated:
            raise SequenceError("process() requires a prior simulate()")
        if self._summary is None:
            if self.config.verbose:
                print(f"Processing {len(self.bins)} bins")
            self._summary = process_bins(
                self.bins, self.apparatus.num_electrons, self.binwidth)
        return self._summary

    def bin_records(self) -> NDArray:
        """Per-bin rows [position, total count, avg momentum, momentum uncertainty]."""
        if not self._simulated:
            raise SequenceError("bin_records() requires a prior simulate()")
        return np.array([(b.end, *b.result()) for b in self.bins])

    def write_csv(self, path: Optional[str] = None) -> str:
        """Write the per-bin records as CSV; returns the file path."""
        if path is None:
            path = os.path.join(output_dir(), DEFAULT_OUTPUT_FILENAME)
        np.savetxt(path, self.bin_records(), delimiter=',',
                   header=CSV_HEADER, comments='')
        return path

    def report(self) -> str:
        """Conditions and results as text (requires ``process()``)."""
        if self._summary is None:
            raise SequenceError("report() requires a prior process()")
        return self.apparatus.conditions() + self._summary.render()


def run_sim(**options) -> PhotoemissionSimulation:
    """Build a simulation from keyword options, run it and print the report.

    Any keyword accepted by ``ApparatusParameters`` or ``SimulationConfig``
    may be given, e.g. ``run_sim(tau=100e-15, simple=True)``.
    """
    sim = PhotoemissionSimulation.from_options(**options)
    sim.simulate()
    sim.process()
    print(sim.report())
    return sim
