"""Helpers for the simulation step driver.

The collision pass is a pure function of ``(ensemble, grid, dt)``.  These
helpers take care of the caller-side duties: sorting the ensemble by height
when the strategy asks for it, mapping the tendencies back to the caller's
order, and applying them once the pass has finished.
"""
from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import numpy as np

from .grid import VerticalGrid
from .physics.strategies import Collisions
from .superparticle import SpMassTendencies, Superparticle, apply_tendencies

logger = logging.getLogger(__name__)

__all__ = ["sort_by_height", "collision_step", "advance"]


def sort_by_height(sps: Sequence[Superparticle]) -> Tuple[List[Superparticle], np.ndarray]:
    """Return ``(sorted_sps, order)`` with ``sorted_sps[k] is sps[order[k]]``.

    The sort is stable, so particles at equal height keep their order.
    """

    z = np.array([sp.z for sp in sps], dtype=np.float64)
    order = np.argsort(z, kind="stable")
    return [sps[int(i)] for i in order], order


def collision_step(
    sps: Sequence[Superparticle],
    grid: VerticalGrid,
    dt: float,
    strategy: Collisions,
) -> SpMassTendencies:
    """Run one collision pass and return tendencies aligned with ``sps``."""

    if not strategy.needs_sorted_superparticles():
        return strategy.collide(sps, grid, dt)
    sorted_sps, order = sort_by_height(sps)
    tendencies_sorted = strategy.collide(sorted_sps, grid, dt)
    inverse = np.empty_like(order)
    inverse[order] = np.arange(order.size)
    tendencies = tendencies_sorted.take(inverse)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("collision_step: n=%d dt=%g %r", len(sps), dt, tendencies)
    return tendencies


def advance(
    sps: Sequence[Superparticle],
    grid: VerticalGrid,
    dt: float,
    strategy: Collisions,
) -> List[Superparticle]:
    """Run one collision pass and return the updated ensemble."""

    tendencies = collision_step(sps, grid, dt, strategy)
    return apply_tendencies(sps, tendencies)
