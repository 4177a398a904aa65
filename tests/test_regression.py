"""
Photoemission — Regression Test Suite (physics kernels)
========================================================

Spot-checks of the constants, apparatus, transmission model, velocity
integrals, spatial bins and result processing.  Simulation-level checks
live in test_simulation.py.

Run with:
    pytest tests/test_regression.py -v
"""

import math

import numpy as np
import pytest


# ============================================================
# 1. Module imports
# ============================================================

class TestImports:
    """Verify all modules import without error."""

    def test_import_package(self):
        import photoemission  # noqa: F401

    def test_import_simulation(self):
        import photoemission.simulation  # noqa: F401

    def test_import_pulse(self):
        import photoemission.pulse  # noqa: F401

    def test_import_figures(self):
        import photoemission.figures  # noqa: F401


# ============================================================
# 2. Constants and apparatus
# ============================================================

class TestApparatus:
    """Derived quantities of the default (Ta, 4.75 eV) apparatus."""

    def test_hbar(self):
        from photoemission.constants import HBAR
        assert abs(HBAR - 1.0552e-34) / 1.0552e-34 < 1e-3

    def test_emax(self):
        """Emax = q (4.75 - 4.25) eV = 8e-20 J."""
        from photoemission import ApparatusParameters
        app = ApparatusParameters()
        assert app.Emax == pytest.approx(8.0e-20, rel=1e-12)

    def test_vmax(self):
        """vmax = sqrt(2 Emax / m) ~ 4.19e5 m/s."""
        from photoemission import ApparatusParameters
        app = ApparatusParameters()
        assert app.vmax == pytest.approx(math.sqrt(2 * 8.0e-20 / 9.1e-31), rel=1e-12)
        assert abs(app.vmax - 4.193e5) < 1e3

    def test_acc(self):
        from photoemission import ApparatusParameters
        app = ApparatusParameters(dc_field=2e6)
        assert app.acc == pytest.approx(1.6e-19 * 2e6 / 9.1e-31, rel=1e-12)

    def test_kv(self):
        """kV = sqrt(2 m W) / hbar with W = 4.25 taken in eV: ~ 2.636e19 1/m."""
        from photoemission import ApparatusParameters
        from photoemission.constants import HBAR
        app = ApparatusParameters()
        assert abs(app.kV - 2.636e19) / 2.636e19 < 0.01
        assert app.kV == pytest.approx(math.sqrt(2 * 9.1e-31 * 4.25) / HBAR, rel=1e-12)

    def test_derived_values_cached(self):
        from photoemission import ApparatusParameters
        app = ApparatusParameters()
        first = app.vmax
        assert 'vmax' in app.__dict__
        assert app.vmax is first

    @pytest.mark.parametrize('kwargs', [
        {'photon_energy': 4.0},
        {'photon_energy': 4.25},
        {'tau': 0.0},
        {'tau': -1e-12},
        {'num_electrons': 0},
    ])
    def test_invalid_apparatus_rejected(self, kwargs):
        from photoemission import ApparatusParameters, DomainError
        with pytest.raises(DomainError):
            ApparatusParameters(**kwargs)

    def test_domain_error_is_value_error(self):
        from photoemission import ApparatusParameters
        with pytest.raises(ValueError):
            ApparatusParameters(photon_energy=1.0)

    @pytest.mark.parametrize('kwargs', [
        {'num_space_bins': 0},
        {'num_time_slices': -5},
        {'num_space_bins': 10.5},
        {'num_taus': 0},
        {'epsabs': -1e-6},
        {'epsabs': 0.0, 'epsrel': 0.0},
    ])
    def test_invalid_config_rejected(self, kwargs):
        from photoemission import DomainError, SimulationConfig
        with pytest.raises(DomainError):
            SimulationConfig(**kwargs)


# ============================================================
# 3. Transmission model
# ============================================================

KV = 2.636e19  # [1/m] default apparatus kV


class TestTransmission:
    """T(kz) = 4 s kz / (s + kz)^2 with s = sqrt(kV^2 + kz^2)."""

    def test_strictly_increasing(self):
        from photoemission import transmission
        kz = np.logspace(-4, 2, 60) * KV
        T = np.array([transmission(k, KV) for k in kz])
        assert np.all(np.diff(T) > 0)

    def test_range(self):
        from photoemission import transmission
        kz = np.logspace(-6, 2, 40) * KV
        T = np.array([transmission(k, KV) for k in kz])
        assert np.all(T > 0)
        assert np.all(T <= 1)

    def test_limit_small_kz(self):
        """T -> 4 kz / kV -> 0 as kz -> 0+."""
        from photoemission import transmission
        kz = 1e-6 * KV
        assert transmission(kz, KV) == pytest.approx(4e-6, rel=1e-4)

    def test_limit_large_kz(self):
        from photoemission import transmission
        assert transmission(1e6 * KV, KV) > 1 - 1e-9

    def test_kz_equal_kv(self):
        """kz = kV: s = sqrt(2) kV, T = 4 sqrt(2) / (1 + sqrt(2))^2."""
        from photoemission import transmission
        expected = 4 * math.sqrt(2) / (1 + math.sqrt(2)) ** 2
        assert transmission(KV, KV) == pytest.approx(expected, rel=1e-12)

    def test_zero_is_limit(self):
        from photoemission import transmission
        assert transmission(0.0, KV) == 0.0

    def test_negative_rejected(self):
        from photoemission import DomainError, transmission
        with pytest.raises(DomainError):
            transmission(-1.0, KV)


# ============================================================
# 4. Velocity integrals
# ============================================================

@pytest.fixture(scope='module')
def integrator():
    from photoemission import ApparatusParameters, VelocityIntegrator
    return VelocityIntegrator.for_apparatus(ApparatusParameters(tau=100e-15))


class TestVelocityIntegrator:
    """Nested (theta, v) quadrature and the normalised fraction."""

    def test_theta_integral_zero_velocity(self, integrator):
        assert integrator.theta_integral(0.0) == 0.0

    def test_theta_integral_bounded(self, integrator):
        """g(v) = int T sin(theta) lies in (0, 1) and grows with v."""
        g = [integrator.theta_integral(f * integrator.vmax) for f in (0.25, 0.5, 1.0)]
        assert 0 < g[0] < g[1] < g[2] < 1

    def test_theta_integral_small_velocity(self, integrator):
        """Small kz: T ~ 4 kz / kV, so g(v) ~ 2 m v / (hbar kV)."""
        from photoemission.constants import HBAR, MASS
        v = 1e-3 * integrator.vmax
        expected = 2 * MASS * v / (HBAR * integrator.kv)
        assert integrator.theta_integral(v) == pytest.approx(expected, rel=1e-3)

    def test_normalisation(self, integrator):
        """fraction(0, vmax) == 1."""
        assert integrator.normalized_fraction(0.0, integrator.vmax) == \
            pytest.approx(1.0, abs=1e-9)

    def test_vnorm_positive_finite(self, integrator):
        assert integrator.vnorm > 0
        assert np.isfinite(integrator.vnorm)

    def test_additivity(self, integrator):
        """F(0, v) + F(v, vmax) = F(0, vmax)."""
        vmax = integrator.vmax
        split = 0.37 * vmax
        total = (integrator.normalized_fraction(0.0, split)
                 + integrator.normalized_fraction(split, vmax))
        assert total == pytest.approx(1.0, abs=1e-8)

    def test_fraction_monotone_in_width(self, integrator):
        vmax = integrator.vmax
        fractions = [integrator.normalized_fraction(0.0, f * vmax)
                     for f in np.linspace(0.1, 1.0, 10)]
        assert np.all(np.diff(fractions) > 0)

    def test_empty_window(self, integrator):
        assert integrator.velocity_integral(1e5, 1e5) == 0.0

    def test_reversed_window_rejected(self, integrator):
        from photoemission import DomainError
        with pytest.raises(DomainError):
            integrator.velocity_integral(2e5, 1e5)

    def test_non_convergence_raises(self, integrator):
        """An unreachable tolerance surfaces as IntegrationError with context."""
        from photoemission import IntegrationError, VelocityIntegrator
        strict = VelocityIntegrator(integrator.kv, integrator.vmax,
                                    epsabs=1e-300, epsrel=0.0)
        with pytest.raises(IntegrationError) as excinfo:
            strict.theta_integral(0.5 * integrator.vmax)
        err = excinfo.value
        assert err.epsabs == 1e-300
        assert err.interval[0] == 0.0
        assert err.interval[1] == pytest.approx(math.pi / 2)
        assert err.abserr > 0


class TestSimpleFraction:
    """Closed form (v2/vmax)^5 - (v1/vmax)^5 vs the physical model."""

    def test_full_range(self):
        from photoemission import simple_fraction
        assert simple_fraction(0.0, 4e5, 4e5) == pytest.approx(1.0)

    def test_vectorised(self):
        from photoemission import simple_fraction
        f = simple_fraction(np.array([0.0, 0.5]), np.array([0.5, 1.0]), 1.0)
        np.testing.assert_allclose(f, [1 / 32, 31 / 32])

    def test_monotone_in_width(self):
        from photoemission import simple_fraction
        widths = np.linspace(0.1, 1.0, 10)
        f = simple_fraction(0.0, widths, 1.0)
        assert np.all(np.diff(f) > 0)

    @pytest.mark.parametrize('window', [(0.5, 1.0), (0.8, 0.9), (0.9, 1.0)])
    def test_same_order_as_physical(self, integrator, window):
        from photoemission import simple_fraction
        vmax = integrator.vmax
        v1, v2 = window[0] * vmax, window[1] * vmax
        simple = float(simple_fraction(v1, v2, vmax))
        physical = integrator.normalized_fraction(v1, v2)
        assert 0.1 < simple / physical < 10


# ============================================================
# 5. Spatial bins
# ============================================================

class TestBin:
    """Slice storage and cached aggregates."""

    def test_empty_bin_is_zero(self):
        from photoemission import Bin
        assert tuple(Bin(0.0, 1.0).result()) == (0.0, 0.0, 0.0)

    def test_zero_count_slices_not_nan(self):
        from photoemission import Bin
        b = Bin(0.0, 1.0)
        b.add_slice(0.0, 1e5, 2e5)
        b.add_slice(0.0, 3e5, 4e5)
        result = b.result()
        assert tuple(result) == (0.0, 0.0, 0.0)
        assert not any(np.isnan(result))

    def test_single_slice(self):
        from photoemission import Bin
        from photoemission.constants import MASS
        b = Bin(0.0, 1.0)
        b.add_slice(10.0, 1e5, 3e5)
        total, momentum, uncertainty = b.result()
        assert total == 10.0
        assert momentum == pytest.approx(MASS * 2e5, rel=1e-12)
        assert uncertainty == pytest.approx(0.0, abs=1e-30)

    def test_two_slices(self):
        """Velocities 1e5 and 3e5 (equal weight): <p> = 2e5 m, dp = 1e5 m."""
        from photoemission import Bin
        from photoemission.constants import MASS
        b = Bin(0.0, 1.0)
        b.add_slice(1.0, 1e5, 1e5)
        b.add_slice(1.0, 3e5, 3e5)
        total, momentum, uncertainty = b.result()
        assert total == 2.0
        assert momentum == pytest.approx(MASS * 2e5, rel=1e-9)
        assert uncertainty == pytest.approx(MASS * 1e5, rel=1e-6)

    def test_slice_midpoint_stored(self):
        from photoemission import Bin
        b = Bin(0.0, 1.0)
        b.add_slice(3.0, 1.0, 2.0)
        assert b.slices[-1].count == 3.0
        assert b.slices[-1].avg_velocity == 1.5

    def test_result_cached(self):
        from photoemission import Bin
        b = Bin(0.0, 1.0)
        b.add_slice(5.0, 1e5, 2e5)
        first = b.result()
        assert b.result() is first

    def test_add_slice_invalidates_cache(self):
        from photoemission import Bin
        b = Bin(0.0, 1.0)
        b.add_slice(5.0, 1e5, 2e5)
        first = b.result()
        b.add_slice(5.0, 3e5, 4e5)
        second = b.result()
        assert second is not first
        assert second.total_count == 10.0
        assert second.avg_momentum > first.avg_momentum

    def test_invalid_interval(self):
        from photoemission import Bin, DomainError
        with pytest.raises(DomainError):
            Bin(1.0, 1.0)


# ============================================================
# 6. Result processing
# ============================================================

X_CENTRE = 50.5e-9   # [m] centre of bin 50
X_STD = 10e-9        # [m]
V0 = 1e5             # [m/s]
DVDX = 1e12          # [1/s]


@pytest.fixture()
def gaussian_bins():
    """100 bins over [0, 100 nm): gaussian counts, velocity linear in x."""
    from photoemission import Bin
    edges = np.linspace(0.0, 100e-9, 101)
    bins = []
    for lo, hi in zip(edges[:-1], edges[1:]):
        b = Bin(float(lo), float(hi))
        centre = (lo + hi) / 2
        count = 1000.0 * math.exp(-(centre - X_CENTRE) ** 2 / (2 * X_STD ** 2))
        v = V0 + DVDX * hi
        b.add_slice(count, v, v)
        bins.append(b)
    return bins


class TestProcessing:
    """Peak scan, variance and weighted momentum fit."""

    def test_peak(self, gaussian_bins):
        from photoemission import process_bins
        total = sum(b.result().total_count for b in gaussian_bins)
        summary = process_bins(gaussian_bins, total, 1e-9)
        assert summary.x_peak == pytest.approx(51e-9, rel=1e-9)
        assert summary.v_peak == pytest.approx(V0 + DVDX * 51e-9, rel=1e-9)

    def test_sigma(self, gaussian_bins):
        from photoemission import process_bins
        total = sum(b.result().total_count for b in gaussian_bins)
        summary = process_bins(gaussian_bins, total, 1e-9)
        assert summary.sigma == pytest.approx(X_STD ** 2, rel=0.02)

    def test_linear_fit_recovered(self, gaussian_bins):
        """Exactly linear momenta: any weighting returns the true line."""
        from photoemission import process_bins
        from photoemission.constants import MASS
        total = sum(b.result().total_count for b in gaussian_bins)
        summary = process_bins(gaussian_bins, total, 1e-9)
        slope = MASS * DVDX
        assert summary.gamma == pytest.approx(summary.sigma * slope, rel=1e-6)
        assert summary.gamma_offset == pytest.approx(MASS * V0, rel=1e-6)

    def test_weighted_fit_curved_momenta(self):
        """Curved momenta, uneven counts: weighted LS with w = sqrt(N / N_max).

        Weights enter the squared residuals as N / N_max, so bins holding
        more electrons pull the line harder.
        """
        from photoemission import Bin, fit_routine
        from photoemission.constants import MASS
        curvature = 1e21  # [1/(m s)]
        bins = []
        for i in range(20):
            b = Bin(i * 1e-9, (i + 1) * 1e-9)
            v = V0 + DVDX * b.end + curvature * (b.end - 10e-9) ** 2
            b.add_slice(1.0 + i ** 2, v, v)
            bins.append(b)

        # window 10.5 nm +/- 12 nm covers all 20 bins
        sigma = 72e-18
        fit = fit_routine(bins, 10.5e-9, sigma, 1e-9)
        assert fit['n_bins'] == 20

        x = np.array([b.end for b in bins])
        counts = np.array([b.result().total_count for b in bins])
        p = np.array([b.result().avg_momentum for b in bins])

        def weighted_line(W):
            x_mean = np.sum(W * x) / np.sum(W)
            p_mean = np.sum(W * p) / np.sum(W)
            slope = np.sum(W * (x - x_mean) * (p - p_mean)) / np.sum(W * (x - x_mean) ** 2)
            return slope, p_mean - slope * x_mean

        slope, intercept = weighted_line(counts / counts.max())
        assert fit['slope'] == pytest.approx(slope, rel=1e-6)
        assert fit['gamma'] == pytest.approx(sigma * slope, rel=1e-6)
        assert fit['gamma_offset'] == pytest.approx(intercept, rel=1e-6)

        # the data are curved enough that other weightings give another line
        unweighted, _ = weighted_line(np.ones_like(counts))
        inverse, _ = weighted_line(counts.max() / counts)
        assert abs(unweighted - slope) > 0.1 * abs(slope)
        assert abs(inverse - slope) > 0.1 * abs(slope)
        assert slope > MASS * DVDX

    def test_eta_zero_without_spread(self, gaussian_bins):
        from photoemission import process_bins
        total = sum(b.result().total_count for b in gaussian_bins)
        summary = process_bins(gaussian_bins, total, 1e-9)
        assert summary.eta == pytest.approx(0.0, abs=1e-60)

    def test_sigma_coeff(self, gaussian_bins):
        from photoemission import process_bins
        from photoemission.processing import fit_window
        total = sum(b.result().total_count for b in gaussian_bins)
        summary = process_bins(gaussian_bins, total, 1e-9)
        window = fit_window(gaussian_bins, summary.x_peak, summary.sigma)
        in_window = sum(b.result().total_count for b in window)
        expected = in_window * 1e-9 / math.sqrt(2 * math.pi * summary.sigma)
        assert summary.sigma_coeff == pytest.approx(expected, rel=1e-9)

    def test_fit_window_bounds(self, gaussian_bins):
        from photoemission.processing import fit_window
        sigma = X_STD ** 2
        half = math.sqrt(2 * sigma)
        window = fit_window(gaussian_bins, 51e-9, sigma)
        assert len(window) >= 2
        assert all(b.begin >= 51e-9 - half and b.end <= 51e-9 + half for b in window)

    def test_insufficient_window(self, gaussian_bins):
        from photoemission import InsufficientDataError, fit_routine
        with pytest.raises(InsufficientDataError):
            fit_routine(gaussian_bins, 51e-9, 1e-20, 1e-9)

    def test_single_populated_bin(self):
        from photoemission import Bin, InsufficientDataError, process_bins
        bins = [Bin(i * 1e-9, (i + 1) * 1e-9) for i in range(10)]
        bins[5].add_slice(100.0, 1e5, 1e5)
        with pytest.raises(InsufficientDataError):
            process_bins(bins, 100.0, 1e-9)

    def test_render(self, gaussian_bins):
        from photoemission import process_bins
        total = sum(b.result().total_count for b in gaussian_bins)
        text = process_bins(gaussian_bins, total, 1e-9).render()
        assert text.startswith('### Results ###')
        assert 'Fit Equation for sigma:' in text
        assert 'Fit Equation for gamma:' in text

    def test_summary_immutable(self, gaussian_bins):
        import dataclasses
        from photoemission import process_bins
        total = sum(b.result().total_count for b in gaussian_bins)
        summary = process_bins(gaussian_bins, total, 1e-9)
        with pytest.raises(dataclasses.FrozenInstanceError):
            summary.sigma = 0.0
        assert set(summary.as_dict()) == {
            'sigma', 'sigma_coeff', 'eta', 'gamma', 'gamma_offset', 'x_peak', 'v_peak'}
