"""
Photoemission — Velocity Distribution Integrals
================================================

The emitted-velocity distribution is built from the transmission
coefficient weighted over emission angle:

    g(v) = int_0^{pi/2}  T(m v cos(theta) / hbar) sin(theta)  d theta

    F(v_l, v_u) = int_{v_l}^{v_u} g(v) dv

    fraction(v_l, v_u) = F(v_l, v_u) / F(0, vmax)

so that ``fraction`` is the share of emitted electrons whose speed lies in
[v_l, v_u].  Both integrals use adaptive Gauss-Kronrod quadrature
(``scipy.integrate.quad``, QUADPACK qags) with the same tolerances.

A quadrature that does not converge raises ``IntegrationError`` instead of
returning a poorly converged value: a bad normalisation would silently
rescale every bin of the simulation.

``simple_fraction`` is the closed-form (v/vmax)^5 model used by the fast
validation mode.  It is an intentionally different distribution, of the
same order of magnitude as ``fraction`` on the upper part of the range.
"""

from __future__ import annotations

import math
from functools import cached_property

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.integrate import quad

from .config import DEFAULT_EPSABS, DEFAULT_EPSREL
from .constants import HBAR, MASS, PI
from .errors import DomainError, IntegrationError
from .transmission import transmission

# QUADPACK subinterval limit (scipy default is 50)
QUAD_LIMIT: int = 200


def _adaptive_quad(func, lower: float, upper: float,
                   epsabs: float, epsrel: float) -> float:
    """Run ``quad`` and raise IntegrationError unless it reports success."""
    out = quad(func, lower, upper, epsabs=epsabs, epsrel=epsrel,
               limit=QUAD_LIMIT, full_output=1)
    # quad appends a message to the returned tuple only when ier != 0
    if len(out) > 3:
        raise IntegrationError(
            f"Quadrature did not converge: {out[3]}",
            (lower, upper), epsabs, epsrel, out[1],
        )
    return out[0]


class VelocityIntegrator:
    """Transmission-weighted velocity integrals for one apparatus.

    Parameters
    ----------
    kv : float
        Barrier wavevector [1/m] (``ApparatusParameters.kV``).
    vmax : float
        Maximum emission velocity [m/s] (``ApparatusParameters.vmax``).
    epsabs, epsrel : float
        Quadrature tolerances, shared by the theta and velocity integrals.
    """

    def __init__(self, kv: float, vmax: float,
                 epsabs: float = DEFAULT_EPSABS,
                 epsrel: float = DEFAULT_EPSREL):
        self.kv = kv
        self.vmax = vmax
        self.epsabs = epsabs
        self.epsrel = epsrel

    @classmethod
    def for_apparatus(cls, apparatus, epsabs=DEFAULT_EPSABS, epsrel=DEFAULT_EPSREL):
        return cls(apparatus.kV, apparatus.vmax, epsabs=epsabs, epsrel=epsrel)

    def theta_integral(self, v: float) -> float:
        """Angle-integrated transmission g(v) for emission speed ``v``."""
        if v == 0:
            return 0.0
        kz_scale = MASS * v / HBAR
        kv = self.kv

        def integrand(theta):
            return transmission(kz_scale * math.cos(theta), kv) * math.sin(theta)

        return _adaptive_quad(integrand, 0.0, PI / 2, self.epsabs, self.epsrel)

    def velocity_integral(self, v_low: float, v_high: float) -> float:
        """F(v_low, v_high): integral of g(v) over the velocity window."""
        if v_low > v_high:
            raise DomainError(
                f"Velocity window is reversed: v_low={v_low!r} > v_high={v_high!r}")
        if v_low < 0:
            raise DomainError(f"Velocities must be non-negative, got v_low={v_low!r}")
        if v_low == v_high:
            return 0.0
        return _adaptive_quad(self.theta_integral, v_low, v_high,
                              self.epsabs, self.epsrel)

    @cached_property
    def vnorm(self) -> float:
        """Normalisation F(0, vmax), computed once."""
        return self.velocity_integral(0.0, self.vmax)

    def normalized_fraction(self, v_low: float, v_high: float) -> float:
        """Fraction of emitted electrons with speed in [v_low, v_high]."""
        return self.velocity_integral(v_low, v_high) / self.vnorm


def simple_fraction(v_low: ArrayLike, v_high: ArrayLike, vmax: float) -> NDArray:
    """Closed-form fraction (v_high/vmax)^5 - (v_low/vmax)^5.

    Parameters
    ----------
    v_low, v_high : float or array
        Window limits [m/s], already clamped to [0, vmax].
    vmax : float
        Maximum emission velocity [m/s].
    """
    v_low = np.asarray(v_low, dtype=float)
    v_high = np.asarray(v_high, dtype=float)
    return (v_high / vmax) ** 5 - (v_low / vmax) ** 5
