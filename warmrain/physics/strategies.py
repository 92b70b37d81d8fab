"""Collision strategies selectable by the simulation driver.

Every strategy answers :meth:`Collisions.needs_sorted_superparticles`.  The
caller must honour that flag: :class:`HallCollisions` expects the ensemble
sorted by ascending height and does not check it.  For unsorted input the
layer boundaries found by the binary search are meaningless.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..errors import ConfigurationError
from ..grid import VerticalGrid
from ..runtime.numba_config import numba_disabled_env, numba_status
from ..superparticle import SpMassTendencies, Superparticle
from . import collide
from .collide import collide_layer
from .efficiencies import EfficiencyProvider, HallEfficiencyTable
from .partition import sort_layer
from .sedimentation import Sedimentation

logger = logging.getLogger(__name__)

__all__ = [
    "Collisions",
    "HallCollisions",
    "NoCollisions",
    "layer_slices",
    "make_hall_collisions",
    "make_no_collisions",
]

LayerWork = Tuple[List[Superparticle], List[int]]


class Collisions(ABC):
    """Interface of a collision scheme."""

    @abstractmethod
    def collide(self, sps: Sequence[Superparticle], grid: VerticalGrid, dt: float) -> SpMassTendencies:
        """Return one tendency per superparticle, index-aligned with ``sps``."""

    @abstractmethod
    def needs_sorted_superparticles(self) -> bool:
        """Return True when :meth:`collide` requires input sorted by height."""


def layer_slices(z: np.ndarray, levels: np.ndarray) -> List[Tuple[int, int]]:
    """Return ``[start, stop)`` ranges of a height-sorted array per layer.

    Each layer ``[levels[k], levels[k+1])`` maps to one contiguous slice
    found by a lower-bound search.  Particles below the first level or at or
    above the last level fall outside every slice.
    """

    if levels.size == 0:
        return []
    bounds = np.searchsorted(z, levels, side="left")
    # Levels are non-decreasing, so the bounds are too.
    return [(int(bounds[k]), int(bounds[k + 1])) for k in range(levels.size - 1)]


class HallCollisions(Collisions):
    """Stochastic coalescence with the Hall collision kernel.

    Parameters
    ----------
    sedimentation:
        Fall-speed provider shared by all layers.
    efficiencies:
        Collision-efficiency provider; the Hall (1980) table by default.
    workers:
        Number of threads used to process layers.  Layers write disjoint
        tendency slots, so no locking is needed.
    use_numba:
        Forwarded to the collision engine.
    """

    def __init__(
        self,
        sedimentation: Sedimentation,
        efficiencies: Optional[EfficiencyProvider] = None,
        *,
        workers: int = 1,
        use_numba: bool | None = None,
    ) -> None:
        if int(workers) < 1:
            raise ConfigurationError("workers must be at least 1")
        self.sedimentation = sedimentation
        self.efficiencies = efficiencies if efficiencies is not None else HallEfficiencyTable.hall()
        self.workers = int(workers)
        self.use_numba = use_numba

    def needs_sorted_superparticles(self) -> bool:
        return True

    def jit_status(self) -> dict[str, object]:
        """Return the JIT state the collision engine will use."""

        if self.use_numba is None:
            use = collide._USE_NUMBA and not collide._NUMBA_FAILED
        else:
            use = bool(self.use_numba)
        return numba_status(numba_disabled_env(), use, collide._NUMBA_FAILED)

    def collide(self, sps: Sequence[Superparticle], grid: VerticalGrid, dt: float) -> SpMassTendencies:
        tendencies = SpMassTendencies.zeros(len(sps))
        levels = grid.level_boundaries()
        if levels.size == 0:
            return tendencies
        z = np.array([sp.z for sp in sps], dtype=np.float64)
        work: List[LayerWork] = []
        for start, stop in layer_slices(z, levels):
            members = [i for i in range(start, stop) if sps[i].is_nucleated]
            work.append(([sps[i] for i in members], members))
        self._run_layers(work, tendencies, dt)
        return tendencies

    def collide_partitioned(
        self, sps: Sequence[Superparticle], grid: VerticalGrid, dt: float
    ) -> SpMassTendencies:
        """Like :meth:`collide` but for an ensemble in arbitrary order."""

        tendencies = SpMassTendencies.zeros(len(sps))
        work: List[LayerWork] = []
        for layer in sort_layer(sps, grid):
            work.append(([isp.sp for isp in layer], [isp.index for isp in layer]))
        self._run_layers(work, tendencies, dt)
        return tendencies

    def _collide_one(self, item: LayerWork, out: SpMassTendencies, dt: float) -> None:
        particles, indices = item
        collide_layer(
            particles,
            indices,
            out,
            dt,
            self.sedimentation,
            self.efficiencies,
            use_numba=self.use_numba,
        )

    def _run_layers(self, work: List[LayerWork], out: SpMassTendencies, dt: float) -> None:
        active = [item for item in work if len(item[0]) >= 2]
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "HallCollisions: layers=%d active=%d workers=%d dt=%g numba=%s",
                len(work),
                len(active),
                self.workers,
                dt,
                self.jit_status(),
            )
        if self.workers > 1 and len(active) > 1:
            with ThreadPoolExecutor(max_workers=min(self.workers, len(active))) as executor:
                futures = [executor.submit(self._collide_one, item, out, dt) for item in active]
                for future in futures:
                    future.result()
            return
        for item in active:
            self._collide_one(item, out, dt)


class NoCollisions(Collisions):
    """Scheme that leaves every superparticle unchanged."""

    def collide(self, sps: Sequence[Superparticle], grid: VerticalGrid, dt: float) -> SpMassTendencies:
        return SpMassTendencies.zeros(len(sps))

    def needs_sorted_superparticles(self) -> bool:
        return False


def make_hall_collisions(
    sedimentation: Sedimentation,
    efficiencies: Optional[EfficiencyProvider] = None,
    *,
    workers: int = 1,
    use_numba: bool | None = None,
) -> Collisions:
    return HallCollisions(sedimentation, efficiencies, workers=workers, use_numba=use_numba)


def make_no_collisions() -> Collisions:
    return NoCollisions()
