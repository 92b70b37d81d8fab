"""Exceptions raised by :mod:`warmrain`.

The collision pass never raises on droplet data; these cover misuse of the
API such as a malformed grid, an invalid configuration or an unreadable
efficiency table.
"""
from __future__ import annotations


class WarmRainError(Exception):
    """Root of every error raised by warmrain."""


class ConfigurationError(WarmRainError, ValueError):
    """A grid, provider or YAML setting is out of its allowed range."""


class PhysicsError(WarmRainError, ValueError):
    """A droplet quantity has no physical meaning, e.g. a negative radius."""


class TableLoadError(WarmRainError, RuntimeError):
    """A collision-efficiency table is missing, unreadable or incomplete."""


__all__ = [
    "WarmRainError",
    "ConfigurationError",
    "PhysicsError",
    "TableLoadError",
]
