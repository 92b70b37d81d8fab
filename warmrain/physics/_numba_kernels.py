"""Numba-accelerated pairwise sums for the Hall collision engine.

The collision kernel matrix is built in NumPy because it calls the
efficiency provider; the O(n²) accumulation of loss rates and transferred
volumes over that matrix runs here.  ``nogil=True`` lets layers processed
by a thread pool run concurrently.
"""
from __future__ import annotations

import numpy as np
from numba import njit

__all__ = ["hall_layer_sums_numba"]


@njit(cache=True, nogil=True)
def hall_layer_sums_numba(
    K: np.ndarray,
    N: np.ndarray,
    r: np.ndarray,
    dt: float,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Accumulate per-particle loss, gain and volume for one layer.

    Parameters
    ----------
    K : ndarray
        Symmetric kernel matrix ``(n, n)`` in ascending-radius order.
    N : ndarray
        Multiplicities in the same order.
    r : ndarray
        Radii in the same order.
    dt : float
        Timestep.

    Returns
    -------
    loss : ndarray
        ``dt`` times the (negative) population loss rate.
    gain : ndarray
        ``dt`` times the volume gathered from smaller particles.
    volume : ndarray
        ``dt`` times the sum of ``r³`` and the net volume exchange.
    """
    n = r.shape[0]
    loss = np.zeros(n, dtype=np.float64)
    gain = np.zeros(n, dtype=np.float64)
    volume = np.zeros(n, dtype=np.float64)
    for i in range(n):
        r3 = r[i] * r[i] * r[i]
        internal = -K[i, i] * 0.5 * N[i] * (N[i] - 1.0)
        external = 0.0
        from_larger = 0.0
        for j in range(i + 1, n):
            external -= K[i, j] * N[i] * N[j]
            from_larger -= K[i, j] * N[j] * r3
        from_smaller = 0.0
        for j in range(i):
            from_smaller += K[i, j] * N[j] * r[j] * r[j] * r[j]
        loss[i] = dt * (internal + external)
        gain[i] = dt * from_smaller
        volume[i] = dt * (r3 + from_smaller + from_larger)
    return loss, gain, volume
