from __future__ import annotations

from warmrain.runtime.numba_config import numba_disabled_env, numba_status


def test_numba_disabled_env_prefers_new_variable(monkeypatch) -> None:
    monkeypatch.setenv("WARMRAIN_DISABLE_NUMBA", "1")
    monkeypatch.setenv("WARMRAIN_NUMBA_DISABLE", "0")
    assert numba_disabled_env() is False

    monkeypatch.setenv("WARMRAIN_NUMBA_DISABLE", "1")
    assert numba_disabled_env() is True


def test_numba_disabled_env_compat_variable(monkeypatch) -> None:
    monkeypatch.delenv("WARMRAIN_NUMBA_DISABLE", raising=False)
    monkeypatch.setenv("WARMRAIN_DISABLE_NUMBA", "yes")
    assert numba_disabled_env() is True


def test_unrecognised_values_are_ignored() -> None:
    assert numba_disabled_env({"WARMRAIN_NUMBA_DISABLE": "maybe"}) is False
    assert numba_disabled_env({}) is False


def test_numba_status_payload() -> None:
    assert numba_status(False, True, False) == {
        "disabled_env": False,
        "use_numba": True,
        "numba_failed": False,
    }
