"""Per-layer profiles of a superparticle ensemble.

These are read-only summaries of the post-collision state for logging and
output layers; they never feed back into the collision pass.
"""
from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
import pandas as pd

from .grid import VerticalGrid
from .physics.partition import sort_layer
from .superparticle import Superparticle

logger = logging.getLogger(__name__)

__all__ = [
    "qc_profile",
    "mean_radius_profile",
    "max_radius_profile",
    "stddev_radius_profile",
    "count_nucleated",
    "layer_profiles",
]


def _layer_radii(sps: Sequence[Superparticle], grid: VerticalGrid) -> list[np.ndarray]:
    return [np.array([isp.sp.radius for isp in layer], dtype=float) for layer in sort_layer(sps, grid)]


def qc_profile(sps: Sequence[Superparticle], grid: VerticalGrid) -> np.ndarray:
    """Return the summed liquid water of nucleated particles per layer."""

    return np.array([sum(isp.sp.qc for isp in layer) for layer in sort_layer(sps, grid)], dtype=float)


def mean_radius_profile(sps: Sequence[Superparticle], grid: VerticalGrid) -> np.ndarray:
    return np.array([float(np.mean(r)) if r.size else 0.0 for r in _layer_radii(sps, grid)], dtype=float)


def max_radius_profile(sps: Sequence[Superparticle], grid: VerticalGrid) -> np.ndarray:
    return np.array([float(np.max(r)) if r.size else 0.0 for r in _layer_radii(sps, grid)], dtype=float)


def stddev_radius_profile(sps: Sequence[Superparticle], grid: VerticalGrid) -> np.ndarray:
    return np.array([float(np.std(r)) if r.size else 0.0 for r in _layer_radii(sps, grid)], dtype=float)


def count_nucleated(sps: Sequence[Superparticle], grid: VerticalGrid) -> np.ndarray:
    return np.array([len(layer) for layer in sort_layer(sps, grid)], dtype=np.int64)


def layer_profiles(sps: Sequence[Superparticle], grid: VerticalGrid) -> pd.DataFrame:
    """Return all profiles as a DataFrame indexed by layer centre height."""

    layers = sort_layer(sps, grid)
    radii = [np.array([isp.sp.radius for isp in layer], dtype=float) for layer in layers]
    frame = pd.DataFrame(
        {
            "qc": [sum(isp.sp.qc for isp in layer) for layer in layers],
            "r_mean": [float(np.mean(r)) if r.size else 0.0 for r in radii],
            "r_max": [float(np.max(r)) if r.size else 0.0 for r in radii],
            "r_std": [float(np.std(r)) if r.size else 0.0 for r in radii],
            "n_nucleated": [len(layer) for layer in layers],
        },
        index=pd.Index(grid.layer_centres(), name="z"),
    )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("layer_profiles: n_lay=%d qc_sum=%e", grid.n_lay, float(frame["qc"].sum()))
    return frame
