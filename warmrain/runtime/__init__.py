"""Runtime switches shared across the package."""
from .numba_config import numba_disabled_env, numba_status

__all__ = ["numba_disabled_env", "numba_status"]
