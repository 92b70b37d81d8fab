"""Grouping of superparticles into vertical layers.

Only nucleated particles take part; each layer is returned sorted by
ascending radius.  Python's sort is stable, so ties keep the ensemble order
and repeated calls give identical layers.
"""
from __future__ import annotations

import logging
from typing import List, Sequence

from ..grid import VerticalGrid
from ..superparticle import IndexedSuperparticle, Superparticle

logger = logging.getLogger(__name__)

__all__ = ["sort_layer", "sortsps"]


def sort_layer(sps: Sequence[Superparticle], grid: VerticalGrid) -> List[List[IndexedSuperparticle]]:
    """Return the nucleated particles of each layer in ensemble order.

    Particles outside the grid belong to no layer and are dropped.
    """

    out: List[List[IndexedSuperparticle]] = [[] for _ in range(grid.n_lay)]
    n_outside = 0
    for i, sp in enumerate(sps):
        if not sp.is_nucleated:
            continue
        k = grid.layer_index(sp.z)
        if 0 <= k < grid.n_lay:
            out[k].append(IndexedSuperparticle(index=i, sp=sp))
        else:
            n_outside += 1
    if n_outside and logger.isEnabledFor(logging.DEBUG):
        logger.debug("sort_layer: %d nucleated particles outside the grid", n_outside)
    return out


def sortsps(sps: Sequence[Superparticle], grid: VerticalGrid) -> List[List[IndexedSuperparticle]]:
    """Return per-layer particle lists sorted by ascending radius."""

    layers = sort_layer(sps, grid)
    for k, layer in enumerate(layers):
        layers[k] = sorted(layer, key=lambda isp: isp.sp.radius)
    return layers
