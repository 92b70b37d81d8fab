"""Environment switch for the JIT pairwise sums of the collision engine.

``WARMRAIN_NUMBA_DISABLE=1`` (or the alias ``WARMRAIN_DISABLE_NUMBA``) makes
:func:`warmrain.physics.collide.hall_layer_sums` use its NumPy path.
"""
from __future__ import annotations

import os
from typing import Mapping, Optional

_ON_WORDS = frozenset({"1", "true", "yes", "on", "enable", "enabled"})
_OFF_WORDS = frozenset({"0", "false", "no", "off", "disable", "disabled"})

# Checked in order; the first one holding a recognised word decides.
_SWITCH_VARS = ("WARMRAIN_NUMBA_DISABLE", "WARMRAIN_DISABLE_NUMBA")


def _parse_switch(raw: Optional[str]) -> Optional[bool]:
    if raw is None:
        return None
    word = raw.strip().lower()
    if word in _ON_WORDS:
        return True
    if word in _OFF_WORDS:
        return False
    return None


def numba_disabled_env(env: Optional[Mapping[str, str]] = None) -> bool:
    """Return True when the environment turns the JIT collision sums off.

    Unset variables and unrecognised words leave the JIT path enabled.
    """

    source = os.environ if env is None else env
    for name in _SWITCH_VARS:
        switch = _parse_switch(source.get(name))
        if switch is not None:
            return switch
    return False


def numba_status(disabled_env: bool, use_numba: bool, numba_failed: bool) -> dict[str, object]:
    """Describe which path the collision sums take, for debug logs."""

    return {
        "disabled_env": bool(disabled_env),
        "use_numba": bool(use_numba),
        "numba_failed": bool(numba_failed),
    }


__all__ = [
    "numba_disabled_env",
    "numba_status",
]
