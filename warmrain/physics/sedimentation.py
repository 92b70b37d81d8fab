"""Terminal fall speed of cloud and rain droplets.

The piecewise law of Rogers & Yau (p. 126) is used::

    v = k1 r²      r < 40 µm
    v = k2 r       40 µm ≤ r < 0.6 mm
    v = k3 √r      r ≥ 0.6 mm

Radii above 2 mm are outside the validated range.  They are reported with a
:class:`~warmrain.warnings.PhysicsWarning` but still evaluated so that one
large drop cannot fail a whole collision pass.
"""
from __future__ import annotations

import logging
import warnings

import numpy as np

from ..constants import FallSpeedLaw
from ..errors import PhysicsError
from ..warnings import PhysicsWarning

logger = logging.getLogger(__name__)

DEFAULT_LAW = FallSpeedLaw()

__all__ = ["fall_speed", "Sedimentation", "DEFAULT_LAW"]


def fall_speed(r: float | np.ndarray, law: FallSpeedLaw = DEFAULT_LAW) -> float | np.ndarray:
    """Return the terminal fall speed [m/s] for radius ``r`` [m].

    Scalars give a float; arrays give an array of the same shape.
    """

    r_arr = np.asarray(r, dtype=np.float64)
    if np.any(r_arr < 0.0):
        raise PhysicsError("fall_speed requires non-negative radii")
    if np.any(r_arr > law.r_max):
        r_big = float(np.max(r_arr))
        logger.warning("large drops present, adjust droplet fall_speed function, r=%e", r_big)
        warnings.warn(
            f"large drops present (r={r_big:.3e} m > {law.r_max:.1e} m); fall speed is extrapolated",
            PhysicsWarning,
            stacklevel=2,
        )
    v = np.where(
        r_arr < law.r1,
        law.k1 * r_arr * r_arr,
        np.where(r_arr < law.r2, law.k2 * r_arr, law.k3 * np.sqrt(r_arr)),
    )
    if v.ndim == 0:
        return float(v)
    return v


class Sedimentation:
    """Fall-speed provider injected into the collision engine.

    The provider is stateless apart from its law coefficients, so one
    instance can be shared by all layers of a pass.
    """

    def __init__(self, law: FallSpeedLaw = DEFAULT_LAW) -> None:
        self.law = law

    def fall_speed(self, r: float | np.ndarray) -> float | np.ndarray:
        return fall_speed(r, self.law)

    def __repr__(self) -> str:
        return f"Sedimentation(r_max={self.law.r_max:g})"
