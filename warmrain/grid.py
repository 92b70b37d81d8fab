"""Vertical grid utilities for the column model.

The grid is a monotonic sequence of level heights.  Layer ``i`` is the slab
``[levels[i], levels[i+1])``; particles are assumed well mixed within a
layer for collision purposes.  A grid is treated as immutable for the
duration of a collision pass.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from .errors import ConfigurationError


@dataclass(frozen=True)
class VerticalGrid:
    """Layer/level layout of the simulated column.

    Parameters
    ----------
    levels:
        Level heights (m), non-decreasing.  Fewer than two levels yield a
        grid without layers.
    """

    levels: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        lv = np.asarray(self.levels, dtype=float).reshape(-1)
        if lv.size > 1 and np.any(np.diff(lv) < 0.0):
            raise ConfigurationError("grid levels must be non-decreasing")
        if not np.all(np.isfinite(lv)):
            raise ConfigurationError("grid levels must be finite")
        lv.setflags(write=False)
        object.__setattr__(self, "levels", lv)

    @classmethod
    def from_levels(cls, levels: Iterable[float]) -> "VerticalGrid":
        return cls(levels=np.asarray(list(levels), dtype=float))

    @classmethod
    def uniform(cls, z_top: float, length: float) -> "VerticalGrid":
        """Generate a grid of constant layer thickness ``length`` from 0 to ``z_top``."""

        if length <= 0.0:
            raise ConfigurationError("layer length must be positive")
        if z_top < 0.0:
            raise ConfigurationError("z_top must be non-negative")
        n_lay = int(round(z_top / length))
        return cls.from_levels(np.arange(n_lay + 1, dtype=float) * length)

    @property
    def n_lay(self) -> int:
        return max(int(self.levels.size) - 1, 0)

    @property
    def n_lvl(self) -> int:
        return int(self.levels.size)

    def level_boundaries(self) -> np.ndarray:
        """Return the ascending level heights."""

        return self.levels.copy()

    def layer_index(self, z: float) -> int:
        """Return the layer containing height ``z``.

        Values below the lowest level map to ``-1`` and values at or above
        the top level map to ``n_lay``.
        """

        if self.levels.size == 0:
            return -1
        idx = int(np.searchsorted(self.levels, z, side="right")) - 1
        return min(idx, self.n_lay)

    def contains(self, z: float) -> bool:
        return 0 <= self.layer_index(z) < self.n_lay

    def layer_centres(self) -> np.ndarray:
        if self.n_lay == 0:
            return np.zeros(0, dtype=float)
        return 0.5 * (self.levels[:-1] + self.levels[1:])

    def layer_centre(self, i: int) -> float:
        return float(0.5 * (self.levels[i] + self.levels[i + 1]))


__all__ = ["VerticalGrid"]
