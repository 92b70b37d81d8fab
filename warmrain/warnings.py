"""Warning categories emitted while a collision pass keeps running.

Filter on :class:`WarmRainWarning` to silence or escalate all of them.
"""
from __future__ import annotations


class WarmRainWarning(UserWarning):
    """Common parent of the warmrain diagnostics."""


class PhysicsWarning(WarmRainWarning):
    """Droplets outside the fall-speed law or with a non-positive radius."""


class NumericalWarning(WarmRainWarning):
    """Empty multiplicities, non-finite collision rates or a JIT fallback."""


class TableWarning(WarmRainWarning):
    """Efficiency table entries that are clipped on lookup."""


__all__ = [
    "WarmRainWarning",
    "PhysicsWarning",
    "NumericalWarning",
    "TableWarning",
]
