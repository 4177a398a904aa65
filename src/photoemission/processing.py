"""
Photoemission — Result Processing (AG model parameters)
========================================================

Reduces the filled spatial bins to the AG-model initial conditions:

1. Scan the bins in spatial order, locating the peak (bin with the most
   electrons) and accumulating the first two spatial moments.

       sigma_z = <x^2> - <x>^2          (moments normalised by N_electrons)

2. Select the bins within x_peak +/- sqrt(2 sigma_z) and fit the bin
   average momentum linearly in position, weighting each residual by
   sqrt(N / N_max).  This is a *linear* weight (sigma_i = (N/N_max)^-1/2),
   not the inverse-variance 1/sigma^2 weight.

       p(x) ~ slope * x + intercept
       gamma_z = sigma_z * slope,   gamma_offset = intercept

3. eta_z is the count-weighted mean squared momentum uncertainty over the
   fit window, and sigma_coeff the amplitude of the equivalent Gaussian:

       n(x) ~ sigma_coeff * exp(-(x - x_peak)^2 / (2 sigma_z))

Bin positions are taken at the bin *end* throughout.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import List, Sequence

import numpy as np

from .bins import Bin
from .constants import MASS, PI
from .errors import InsufficientDataError


@dataclass(frozen=True)
class ResultSummary:
    """AG-model parameters extracted from a simulated pulse.

    Attributes
    ----------
    sigma : spatial variance sigma_z [m^2]
    sigma_coeff : amplitude of the fitted Gaussian density [electrons / m]
    eta : momentum-uncertainty term eta_z [(kg m/s)^2]
    gamma : momentum-position correlation gamma_z [kg m^3/s]
    gamma_offset : intercept of the momentum fit [kg m/s]
    x_peak : peak position of the pulse [m]
    v_peak : average velocity in the peak bin [m/s]
    """
    sigma: float
    sigma_coeff: float
    eta: float
    gamma: float
    gamma_offset: float
    x_peak: float
    v_peak: float

    def as_dict(self) -> dict:
        return asdict(self)

    def render(self) -> str:
        """Text block with the results and the two fit equations."""
        return (
            "### Results ###\n"
            f"Electron pulse peak position = {self.x_peak}\n"
            f"Electron pulse peak velocity = {self.v_peak}\n"
            f"sigma_z = {self.sigma}\n"
            f"eta_z = {self.eta}\n"
            f"gamma_z = {self.gamma}\n"
            "\n"
            f"gamma_offset = {self.gamma_offset}\n"
            "\n"
            "Fit Equation for sigma:\n"
            f"{self.sigma_coeff} * exp(-(x - {self.x_peak})^2 / (2 * {self.sigma}))\n"
            "Fit Equation for gamma:\n"
            f"({self.gamma} / {self.sigma}) * x + {self.gamma_offset}\n"
        )


def fit_window(bins: Sequence[Bin], x_peak: float, sigma: float) -> List[Bin]:
    """Bins lying entirely within x_peak +/- sqrt(2 sigma)."""
    if not sigma > 0:
        raise InsufficientDataError(
            f"Spatial variance must be positive to select a fit window, got {sigma!r}")
    half_width = math.sqrt(2 * sigma)
    lower = x_peak - half_width
    upper = x_peak + half_width
    return [b for b in bins if b.begin >= lower and b.end <= upper]


def fit_routine(bins: Sequence[Bin], x_peak: float, sigma: float,
                binwidth: float) -> dict:
    """Weighted linear momentum fit around the peak.

    Returns
    -------
    fit : dict with keys 'eta', 'gamma', 'gamma_offset', 'sigma_coeff',
          'slope' and 'n_bins' (bins in the fit window).
    """
    window = fit_window(bins, x_peak, sigma)
    results = [b.result() for b in window]

    x = np.array([b.end for b in window])
    counts = np.array([r.total_count for r in results])
    momenta = np.array([r.avg_momentum for r in results])
    uncert_sq = np.array([r.momentum_uncertainty ** 2 for r in results])

    n_populated = int(np.count_nonzero(counts > 0))
    if n_populated < 2:
        raise InsufficientDataError(
            f"Fit window x_peak +/- sqrt(2 sigma) = {x_peak:.4g} +/- "
            f"{math.sqrt(2 * sigma):.4g} m holds {n_populated} populated bin(s); "
            f"at least 2 are needed (increase num_space_bins)")

    # residual weights sqrt(N / N_max), i.e. sigma_i = (N / N_max)^-0.5
    weights = np.sqrt(counts / counts.max())
    slope, intercept = np.polyfit(x, momenta, 1, w=weights)

    total = counts.sum()
    return {
        'eta': float(np.sum(counts * uncert_sq) / total),
        'gamma': float(sigma * slope),
        'gamma_offset': float(intercept),
        'sigma_coeff': float(total * binwidth / math.sqrt(2 * PI * sigma)),
        'slope': float(slope),
        'n_bins': len(window),
    }


def process_bins(bins: Sequence[Bin], num_electrons: float,
                 binwidth: float) -> ResultSummary:
    """Peak scan, spatial variance and momentum fit of a filled bin list."""
    av_x = 0.0
    av_x2 = 0.0
    max_electrons = 0.0
    x_peak = 0.0
    v_peak = 0.0

    for b in bins:
        x = b.end
        electrons, avg_momentum, _ = b.result()

        if electrons > max_electrons:
            max_electrons = electrons
            x_peak = x
            v_peak = avg_momentum / MASS

        av_x += electrons * x
        av_x2 += electrons * x ** 2

    sigma = av_x2 / num_electrons - (av_x / num_electrons) ** 2

    fit = fit_routine(bins, x_peak, sigma, binwidth)

    return ResultSummary(
        sigma=sigma,
        sigma_coeff=fit['sigma_coeff'],
        eta=fit['eta'],
        gamma=fit['gamma'],
        gamma_offset=fit['gamma_offset'],
        x_peak=x_peak,
        v_peak=v_peak,
    )
