"""Physical constants used by the warm-rain collision code.

Values are given in SI units.  The fall-speed coefficients follow the
three-regime approximation in Rogers & Yau, *A Short Course in Cloud
Physics*, p. 126.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

PI: float = math.pi

# Density of liquid water (kg m^-3)
RHO_H2O: float = 1000.0

# Fall-speed law coefficients: k1 r^2, k2 r, k3 sqrt(r)
FALL_K1: float = 1.19e8   # m^-1 s^-1
FALL_K2: float = 8.0e3    # s^-1
FALL_K3: float = 2.01e2   # m^0.5 s^-1

# Regime boundaries of the fall-speed law (m)
FALL_R1: float = 40.0e-6
FALL_R2: float = 0.6e-3

# Radii beyond this are outside the validated range of the fall-speed law (m)
FALL_R_MAX: float = 2.0e-3

# Metres to micrometres, used for efficiency table lookups
M_TO_UM: float = 1.0e6


@dataclass(frozen=True)
class FallSpeedLaw:
    """Coefficients and regime limits of the piecewise fall-speed law."""

    k1: float = FALL_K1
    k2: float = FALL_K2
    k3: float = FALL_K3
    r1: float = FALL_R1
    r2: float = FALL_R2
    r_max: float = FALL_R_MAX
