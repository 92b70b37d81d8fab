r"""Collision efficiencies for droplet pairs.

The engine asks for :math:`E(R, r/R)` where ``R`` is the collector radius in
micrometres and ``r/R`` the radius ratio of the collected droplet.  Two
providers are available:

* :class:`HallEfficiencyTable` interpolates the tabulation of Hall (1980),
  J. Atmos. Sci. 37, 2486.
* :class:`ConstantEfficiency` returns a fixed value and is used as a stub in
  tests and sensitivity runs.

Providers are pure functions of their inputs and broadcast over NumPy arrays
so a whole layer can be evaluated with a single call.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np

from ..errors import ConfigurationError

__all__ = [
    "EfficiencyProvider",
    "HallEfficiencyTable",
    "ConstantEfficiency",
    "HALL_R_UM",
    "HALL_RATIOS",
    "HALL_EFFICIENCIES",
]


@runtime_checkable
class EfficiencyProvider(Protocol):
    def collision_efficiency(self, R_um: float | np.ndarray, ratio: float | np.ndarray) -> float | np.ndarray:
        ...


# Collector radii [µm]
HALL_R_UM = np.array([10.0, 20.0, 30.0, 40.0, 50.0, 60.0, 70.0, 100.0, 150.0, 200.0, 300.0])

# Radius ratio r/R of the collected droplet
HALL_RATIOS = np.linspace(0.0, 1.0, 21)

# Rows follow HALL_RATIOS, columns follow HALL_R_UM.
HALL_EFFICIENCIES = np.array(
    [
        [0.0001, 0.0001, 0.0001, 0.001, 0.005, 0.05, 0.2, 0.5, 0.77, 0.87, 0.97],
        [0.0001, 0.0001, 0.002, 0.07, 0.4, 0.43, 0.58, 0.79, 0.93, 0.96, 1.0],
        [0.0001, 0.005, 0.02, 0.28, 0.6, 0.64, 0.75, 0.91, 0.97, 0.98, 1.0],
        [0.014, 0.016, 0.04, 0.5, 0.7, 0.77, 0.84, 0.95, 0.97, 1.0, 1.0],
        [0.017, 0.022, 0.085, 0.62, 0.78, 0.84, 0.88, 0.95, 1.0, 1.0, 1.0],
        [0.019, 0.03, 0.17, 0.68, 0.83, 0.87, 0.9, 1.0, 1.0, 1.0, 1.0],
        [0.022, 0.043, 0.27, 0.74, 0.86, 0.89, 0.92, 1.0, 1.0, 1.0, 1.0],
        [0.027, 0.052, 0.4, 0.78, 0.88, 0.9, 0.94, 1.0, 1.0, 1.0, 1.0],
        [0.03, 0.064, 0.5, 0.8, 0.9, 0.91, 0.95, 1.0, 1.0, 1.0, 1.0],
        [0.033, 0.072, 0.55, 0.8, 0.9, 0.91, 0.95, 1.0, 1.0, 1.0, 1.0],
        [0.035, 0.079, 0.58, 0.8, 0.9, 0.91, 0.95, 1.0, 1.0, 1.0, 1.0],
        [0.037, 0.082, 0.59, 0.78, 0.9, 0.91, 0.95, 1.0, 1.0, 1.0, 1.0],
        [0.038, 0.08, 0.58, 0.77, 0.89, 0.91, 0.95, 1.0, 1.0, 1.0, 1.0],
        [0.038, 0.076, 0.54, 0.76, 0.88, 0.92, 0.95, 1.0, 1.0, 1.0, 1.0],
        [0.037, 0.067, 0.51, 0.77, 0.88, 0.93, 0.97, 1.0, 1.0, 1.0, 1.0],
        [0.036, 0.057, 0.49, 0.77, 0.89, 0.95, 1.0, 1.0, 1.0, 1.0, 1.0],
        [0.035, 0.048, 0.47, 0.78, 0.92, 1.0, 1.02, 1.0, 1.0, 1.0, 1.0],
        [0.032, 0.04, 0.45, 0.79, 1.01, 1.03, 1.04, 1.0, 1.0, 1.0, 1.0],
        [0.029, 0.033, 0.47, 0.95, 1.3, 1.7, 2.3, 1.0, 1.0, 1.0, 1.0],
        [0.027, 0.027, 0.52, 1.4, 2.3, 3.0, 4.0, 1.0, 1.0, 1.0, 1.0],
        [0.027, 0.027, 0.52, 1.4, 2.3, 3.0, 4.0, 1.0, 1.0, 1.0, 1.0],
    ]
)


@dataclass(frozen=True)
class HallEfficiencyTable:
    """Bilinear interpolation on a (ratio, collector radius) grid.

    Inputs outside the tabulated range are clamped to the nearest edge and
    the interpolated value is clipped to ``[0, 1]``; the wake-capture values
    above unity in the raw table therefore saturate.
    """

    R_um_vals: np.ndarray
    ratio_vals: np.ndarray
    e_vals: np.ndarray

    def __post_init__(self) -> None:
        R = np.asarray(self.R_um_vals, dtype=float)
        q = np.asarray(self.ratio_vals, dtype=float)
        e = np.asarray(self.e_vals, dtype=float)
        if R.ndim != 1 or q.ndim != 1 or R.size < 2 or q.size < 2:
            raise ConfigurationError("efficiency table needs at least two radii and two ratios")
        if e.shape != (q.size, R.size):
            raise ConfigurationError(
                f"efficiency grid has shape {e.shape}, expected {(q.size, R.size)}"
            )
        if np.any(np.diff(R) <= 0.0) or np.any(np.diff(q) <= 0.0):
            raise ConfigurationError("efficiency table axes must be strictly increasing")
        if not np.all(np.isfinite(e)) or np.any(e < 0.0):
            raise ConfigurationError("efficiency table values must be finite and non-negative")
        for name, arr in (("R_um_vals", R), ("ratio_vals", q), ("e_vals", e)):
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    @classmethod
    def hall(cls) -> "HallEfficiencyTable":
        return cls(R_um_vals=HALL_R_UM.copy(), ratio_vals=HALL_RATIOS.copy(), e_vals=HALL_EFFICIENCIES.copy())

    def interp(self, R_um: float | np.ndarray, ratio: float | np.ndarray) -> np.ndarray:
        R_arr, q_arr, e = self.R_um_vals, self.ratio_vals, self.e_vals
        R_in, q_in = np.broadcast_arrays(np.asarray(R_um, dtype=float), np.asarray(ratio, dtype=float))
        R_c = np.clip(R_in, R_arr[0], R_arr[-1])
        q_c = np.clip(q_in, q_arr[0], q_arr[-1])
        i = np.clip(np.searchsorted(R_arr, R_c) - 1, 0, len(R_arr) - 2)
        j = np.clip(np.searchsorted(q_arr, q_c) - 1, 0, len(q_arr) - 2)
        R1, R2 = R_arr[i], R_arr[i + 1]
        q1, q2 = q_arr[j], q_arr[j + 1]
        wR = (R_c - R1) / (R2 - R1)
        wq = (q_c - q1) / (q2 - q1)
        e11 = e[j, i]
        e12 = e[j + 1, i]
        e21 = e[j, i + 1]
        e22 = e[j + 1, i + 1]
        e1 = e11 * (1 - wR) + e21 * wR
        e2 = e12 * (1 - wR) + e22 * wR
        return e1 * (1 - wq) + e2 * wq

    def collision_efficiency(self, R_um: float | np.ndarray, ratio: float | np.ndarray) -> float | np.ndarray:
        val = np.clip(self.interp(R_um, ratio), 0.0, 1.0)
        if val.ndim == 0:
            return float(val)
        return val


@dataclass(frozen=True)
class ConstantEfficiency:
    """Efficiency provider returning ``value`` for every pair."""

    value: float = 1.0

    def __post_init__(self) -> None:
        if not (0.0 <= float(self.value) <= 1.0):
            raise ConfigurationError(f"constant collision efficiency must lie in [0, 1], got {self.value}")

    def collision_efficiency(self, R_um: float | np.ndarray, ratio: float | np.ndarray) -> float | np.ndarray:
        shape = np.broadcast(np.asarray(R_um), np.asarray(ratio)).shape
        if not shape:
            return float(self.value)
        return np.full(shape, float(self.value), dtype=np.float64)
