"""Superparticle warm-rain collision-coalescence."""
from . import constants, grid
from .errors import WarmRainError
from .grid import VerticalGrid
from .superparticle import SpMassTendencies, Superparticle, Tendency

__all__ = [
    "constants",
    "grid",
    "WarmRainError",
    "VerticalGrid",
    "Superparticle",
    "SpMassTendencies",
    "Tendency",
]
