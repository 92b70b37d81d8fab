"""Physics modules: sedimentation, efficiencies, partitioning and collisions."""
from . import (
    sedimentation,
    efficiencies,
    partition,
    collide,
    strategies,
)

__all__ = [
    "sedimentation",
    "efficiencies",
    "partition",
    "collide",
    "strategies",
]
