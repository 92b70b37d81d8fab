from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from warmrain.physics import collide  # noqa: E402
from warmrain.physics.efficiencies import ConstantEfficiency  # noqa: E402
from warmrain.physics.sedimentation import Sedimentation  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_numba_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a JIT failure in one test from switching later tests to NumPy."""

    monkeypatch.setattr(collide, "_NUMBA_FAILED", False)


@pytest.fixture()
def unit_efficiency() -> ConstantEfficiency:
    return ConstantEfficiency(1.0)


@pytest.fixture()
def sedimentation() -> Sedimentation:
    return Sedimentation()
