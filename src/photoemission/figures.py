"""
Photoemission — Summary Figures
================================

Two-panel overview of a processed simulation:

(a) electrons per spatial bin, with the equivalent AG gaussian
    sigma_coeff * exp(-(x - x_peak)^2 / (2 sigma_z)) overlaid;
(b) bin average momentum vs position, with the weighted linear fit
    (gamma_z / sigma_z) x + gamma_offset drawn over the fit window.

Positions are plotted in nm, momenta in units of 1e-25 kg m/s.
"""

from __future__ import annotations

import os
from typing import Optional

import numpy as np
import matplotlib.pyplot as plt

from .config import SUMMARY_FIGURE_FILENAME, output_dir as default_output_dir
from .processing import fit_window

NM = 1e9
MOMENTUM_UNIT = 1e-25


def make_simulation_figures(sim, output_dir: Optional[str] = None) -> str:
    """Save the summary figure of a processed simulation; returns its path."""
    summary = sim.summary
    records = sim.bin_records()
    x = records[:, 0]
    counts = records[:, 1]
    momenta = records[:, 2]

    window = fit_window(sim.bins, summary.x_peak, summary.sigma)
    x_fit = np.array([b.end for b in window])

    fig, (ax_a, ax_b) = plt.subplots(1, 2, figsize=(13, 5.5))

    # -- (a) spatial histogram -----------------------------------------
    ax_a.bar(x * NM, counts, width=sim.binwidth * NM, align='edge',
             color='steelblue', alpha=0.6, label='Simulated bins')
    # bar heights are electrons per bin: scale the density by binwidth
    density = summary.sigma_coeff * np.exp(
        -(x - summary.x_peak) ** 2 / (2 * summary.sigma))
    ax_a.plot(x * NM, density * sim.binwidth, 'r-', lw=2,
              label=r'$\sigma$ coeff $\cdot\, e^{-(x-x_p)^2/2\sigma_z}$')
    ax_a.axvline(summary.x_peak * NM, color='k', ls=':', lw=1,
                 label=r'$x_{\rm peak}$')
    ax_a.set_xlabel('Position [nm]', fontsize=12)
    ax_a.set_ylabel('Electrons per bin', fontsize=12)
    ax_a.set_title('Longitudinal density', fontsize=13)
    ax_a.legend(fontsize=10)
    ax_a.grid(True, alpha=0.3)

    # -- (b) momentum-position correlation ---------------------------
    populated = counts > 0
    ax_b.plot(x[populated] * NM, momenta[populated] / MOMENTUM_UNIT, 'b.',
              ms=4, label='Bin average momentum')
    slope = summary.gamma / summary.sigma
    ax_b.plot(x_fit * NM, (slope * x_fit + summary.gamma_offset) / MOMENTUM_UNIT,
              'r-', lw=2, label=r'Fit $(\gamma_z/\sigma_z)\,x + p_0$')
    ax_b.set_xlabel('Position [nm]', fontsize=12)
    ax_b.set_ylabel(r'Momentum [$10^{-25}$ kg m/s]', fontsize=12)
    ax_b.set_title('Momentum chirp', fontsize=13)
    ax_b.legend(fontsize=10)
    ax_b.grid(True, alpha=0.3)

    fig.tight_layout()
    directory = output_dir if output_dir is not None else default_output_dir()
    path = os.path.join(directory, SUMMARY_FIGURE_FILENAME)
    fig.savefig(path, dpi=200, bbox_inches='tight')
    plt.close(fig)
    print(f"  Saved: {SUMMARY_FIGURE_FILENAME}")
    return path
