"""
Photoemission — Physical Constants
===================================

Process-wide physical constants used by every module of the photoemission
simulation.  All values are SI (MKS).  Energies supplied by the user are in
eV and are converted with ``CHARGE`` at the point of use.

The rounded values below are the ones the AG-model reference runs were
produced with; they are kept as-is so that results stay comparable.

=========  ======================  =================================
Name       Value                   Meaning
=========  ======================  =================================
PI         numpy.pi                circle constant
MASS       9.1e-31 kg              mass of a free electron
CHARGE     1.6e-19 C               (magnitude of) electron charge
HBAR       6.63e-34 / (2 pi) J s   reduced Planck constant
=========  ======================  =================================
"""

from __future__ import annotations

import numpy as np

PI: float = float(np.pi)
MASS: float = 9.1e-31             # [kg]
CHARGE: float = 1.6e-19           # [C]
PLANCK: float = 6.63e-34          # [J s]
HBAR: float = PLANCK / (2 * PI)   # [J s]
