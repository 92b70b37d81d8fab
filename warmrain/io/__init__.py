"""Input helpers for tabulated data."""
from . import tables

__all__ = ["tables"]
