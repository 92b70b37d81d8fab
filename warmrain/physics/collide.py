"""Hall collision kernel and the per-layer collision engine.

Within one layer every superparticle is assumed to interact with every
other one.  The engine

1. sorts the layer by ascending radius and evaluates the fall speed of each
   particle once,
2. builds the symmetric Hall kernel matrix
   ``K(r, R) = π (R + r)² |v(R) − v(r)| E(R, r/R)``,
3. turns the pairwise rates into an integer multiplicity change (floored,
   hence never positive) and a liquid water change for every particle but
   the largest, and
4. credits the largest particle with the volume it gathers from all
   smaller ones while leaving its multiplicity untouched.

Results are written into a caller-owned :class:`SpMassTendencies` buffer at
the particles' original ensemble positions.  Superparticles are never
modified.
"""
from __future__ import annotations

import logging
import warnings
from typing import List, Sequence, Tuple

import numpy as np

from ..constants import M_TO_UM, PI, RHO_H2O
from ..runtime.numba_config import numba_disabled_env
from ..superparticle import SpMassTendencies, Superparticle
from ..warnings import NumericalWarning, PhysicsWarning
from ._numba_kernels import hall_layer_sums_numba
from .efficiencies import EfficiencyProvider
from .sedimentation import Sedimentation

_USE_NUMBA = not numba_disabled_env()
# Set after a runtime failure to avoid repeatedly calling a broken JIT kernel.
_NUMBA_FAILED = False

__all__ = [
    "hall_collision_kernel",
    "hall_kernel_matrix",
    "hall_layer_sums",
    "water_content_change",
    "Collider",
    "collide_layer",
]

logger = logging.getLogger(__name__)


def hall_collision_kernel(
    r: float | np.ndarray,
    R: float | np.ndarray,
    fs: float | np.ndarray,
    FS: float | np.ndarray,
    efficiencies: EfficiencyProvider,
) -> float | np.ndarray:
    """Return the Hall collision kernel for droplet pairs.

    Parameters
    ----------
    r, R:
        Radii of the two droplets [m].  Their order does not matter; the
        efficiency is looked up for the larger radius (in µm) and the ratio
        smaller/larger.
    fs, FS:
        Fall speeds belonging to ``r`` and ``R`` [m/s].
    efficiencies:
        Collision-efficiency provider.

    Returns
    -------
    float or numpy.ndarray
        Collision kernel [m³/s], broadcast over the inputs.

    A non-positive larger radius is physically invalid.  It is reported via
    :class:`~warmrain.warnings.PhysicsWarning` and the resulting degenerate
    value is returned unchanged.
    """

    r_a, R_a, fs_a, FS_a = np.broadcast_arrays(
        np.asarray(r, dtype=np.float64),
        np.asarray(R, dtype=np.float64),
        np.asarray(fs, dtype=np.float64),
        np.asarray(FS, dtype=np.float64),
    )
    big = np.maximum(r_a, R_a)
    small = np.minimum(r_a, R_a)
    bad = big <= 0.0
    if np.any(bad):
        n_bad = int(np.count_nonzero(bad))
        logger.warning("hall_collision_kernel: larger radius is zero or smaller in %d pair(s)", n_bad)
        warnings.warn(
            f"hall_collision_kernel: larger radius is zero or smaller in {n_bad} pair(s); "
            "kernel value is degenerate",
            PhysicsWarning,
            stacklevel=2,
        )
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = small / big
        eff = np.asarray(efficiencies.collision_efficiency(big * M_TO_UM, ratio), dtype=np.float64)
        kernel = PI * (R_a + r_a) ** 2 * np.abs(FS_a - fs_a) * eff
    if kernel.ndim == 0:
        return float(kernel)
    return kernel


def hall_kernel_matrix(r: np.ndarray, fs: np.ndarray, efficiencies: EfficiencyProvider) -> np.ndarray:
    """Return the symmetric ``(n, n)`` kernel matrix for radii ``r`` and fall speeds ``fs``."""

    r_arr = np.asarray(r, dtype=np.float64)
    fs_arr = np.asarray(fs, dtype=np.float64)
    return np.asarray(
        hall_collision_kernel(r_arr[:, None], r_arr[None, :], fs_arr[:, None], fs_arr[None, :], efficiencies),
        dtype=np.float64,
    )


def _hall_layer_sums_numpy(
    K: np.ndarray, N: np.ndarray, r: np.ndarray, dt: float
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    upper = np.triu(K, 1)
    lower = np.tril(K, -1)
    r3 = r * r * r
    internal = -np.diag(K) * 0.5 * N * (N - 1.0)
    external = -N * (upper @ N)
    gain = dt * (lower @ (N * r3))
    volume = dt * (r3 + lower @ (N * r3) - r3 * (upper @ N))
    return dt * (internal + external), gain, volume


def hall_layer_sums(
    K: np.ndarray,
    N: np.ndarray,
    r: np.ndarray,
    dt: float,
    *,
    use_numba: bool | None = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(loss, gain, volume)`` for a radius-sorted layer.

    ``loss[i]`` is ``dt`` times the (non-positive) rate at which particle
    ``i`` loses droplets through self-collisions and collisions with every
    larger particle.  ``gain[i]`` is ``dt`` times the volume gathered from
    every smaller particle and ``volume[i]`` is ``dt`` times the sum of ``r_i³``
    and the net volume exchange with every other particle.
    """

    global _NUMBA_FAILED

    K_arr = np.ascontiguousarray(K, dtype=np.float64)
    N_arr = np.ascontiguousarray(N, dtype=np.float64)
    r_arr = np.ascontiguousarray(r, dtype=np.float64)
    use_jit = _USE_NUMBA and not _NUMBA_FAILED if use_numba is None else bool(use_numba)
    if use_jit:
        try:
            return hall_layer_sums_numba(K_arr, N_arr, r_arr, float(dt))
        except Exception as exc:  # pragma: no cover - fallback path
            _NUMBA_FAILED = True
            warnings.warn(
                f"hall_layer_sums: numba kernel failed ({exc!r}); falling back to NumPy.",
                NumericalWarning,
            )
    return _hall_layer_sums_numpy(K_arr, N_arr, r_arr, float(dt))


def water_content_change(
    qc: float | np.ndarray,
    N: float | np.ndarray,
    dN: float | np.ndarray,
    volume: float | np.ndarray,
) -> float | np.ndarray:
    """Convert an updated ``(N + dN, volume)`` pair into a liquid water change.

    ``4/3 π ρ_w (N + dN) volume / (1 − dN/N) − qc``; the denominator rescales
    the per-droplet mass as representative droplets are lost.
    """

    return 4.0 / 3.0 * PI * RHO_H2O * (N + dN) * volume / (1.0 - dN / N) - qc


class Collider:
    """Collision engine for the nucleated particles of one layer.

    Parameters
    ----------
    particles:
        Superparticles of the layer in any order.
    indices:
        Original ensemble position of each entry of ``particles``; results
        are written to these slots of ``out``.
    out:
        Tendency buffer spanning the whole ensemble.
    dt:
        Timestep [s].
    sedimentation, efficiencies:
        Fall-speed and collision-efficiency providers.
    use_numba:
        Force the JIT path on or off; ``None`` follows the environment.

    Particles with a non-positive multiplicity carry no droplets to collide.
    They are left out of the layer, keep a zero tendency and are reported
    with a :class:`~warmrain.warnings.NumericalWarning`.
    """

    def __init__(
        self,
        particles: Sequence[Superparticle],
        indices: Sequence[int],
        out: SpMassTendencies,
        dt: float,
        sedimentation: Sedimentation,
        efficiencies: EfficiencyProvider,
        *,
        use_numba: bool | None = None,
    ) -> None:
        if len(particles) != len(indices):
            raise ValueError("particles and indices must have the same length")
        self.out = out
        self.dt = float(dt)
        self.efficiencies = efficiencies
        self.use_numba = use_numba

        idx_all = np.asarray(indices, dtype=np.int64)
        N_all = np.array([sp.N for sp in particles], dtype=np.float64)
        keep = N_all > 0.0
        if not np.all(keep):
            n_empty = int(np.count_nonzero(~keep))
            logger.warning("Collider: %d particle(s) with non-positive multiplicity skipped", n_empty)
            warnings.warn(
                f"Collider: {n_empty} particle(s) with non-positive multiplicity keep a zero tendency",
                NumericalWarning,
                stacklevel=2,
            )
        local = np.flatnonzero(keep)
        radii = np.array([particles[k].radius for k in local], dtype=np.float64)
        order = np.argsort(radii, kind="stable")

        self.local_index = local[order]
        self.out_index = idx_all[self.local_index]
        self.r = radii[order]
        self.N = N_all[self.local_index]
        self.qc = np.array([particles[k].qc for k in self.local_index], dtype=np.float64)
        self.pc = int(self.r.size)
        if self.pc:
            self.fall_speeds = np.asarray(sedimentation.fall_speed(self.r), dtype=np.float64).reshape(-1)
        else:
            self.fall_speeds = np.zeros(0, dtype=np.float64)
        self._K: np.ndarray | None = None
        self._sums: Tuple[np.ndarray, np.ndarray, np.ndarray] | None = None

    @property
    def ridx(self) -> List[Tuple[float, int]]:
        """``(radius, local index)`` pairs in processing order."""

        return [(float(r), int(k)) for r, k in zip(self.r, self.local_index)]

    @property
    def kernel(self) -> np.ndarray:
        if self._K is None:
            self._K = hall_kernel_matrix(self.r, self.fall_speeds, self.efficiencies)
        return self._K

    def _layer_sums(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        if self._sums is None:
            self._sums = hall_layer_sums(self.kernel, self.N, self.r, self.dt, use_numba=self.use_numba)
        return self._sums

    def loss_rates(self) -> np.ndarray:
        """Return the unfloored multiplicity change ``dt · rate`` in processing order."""

        return self._layer_sums()[0].copy()

    def weights(self, i: int) -> int:
        """Return the floored multiplicity change of the ``i``-th smallest particle."""

        loss = float(self._layer_sums()[0][i])
        if not np.isfinite(loss):
            return 0
        return int(np.floor(loss))

    def mass(self, i: int) -> float:
        """Return ``dt · (r_i³ + gathered − lost)`` for the ``i``-th smallest particle."""

        return float(self._layer_sums()[2][i])

    def calculate(self) -> None:
        if self.pc < 2:
            return
        loss, gain, volume = self._layer_sums()
        last = self.pc - 1

        loss_small = loss[:last]
        finite = np.isfinite(loss_small)
        if not np.all(finite):
            n_bad = int(np.count_nonzero(~finite))
            logger.warning("Collider: non-finite collision rate for %d particle(s); dN set to 0", n_bad)
            warnings.warn(
                f"Collider: non-finite collision rate for {n_bad} particle(s); multiplicity left unchanged",
                NumericalWarning,
                stacklevel=2,
            )
        dN = np.zeros(last, dtype=np.int64)
        dN[finite] = np.floor(loss_small[finite]).astype(np.int64)

        with np.errstate(divide="ignore", invalid="ignore"):
            dqc = water_content_change(self.qc[:last], self.N[:last], dN.astype(np.float64), volume[:last])
            dqc_last = 4.0 / 3.0 * PI * RHO_H2O * self.N[last] * gain[last]

        slots = self.out_index
        self.out.dN[slots[:last]] = dN
        self.out.dqc[slots[:last]] = dqc
        self.out.dqc[slots[last]] = dqc_last

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Collider: pc=%d dt=%g dN_total=%d dqc_total=%e",
                self.pc,
                self.dt,
                int(dN.sum()),
                float(np.sum(dqc) + dqc_last),
            )


def collide_layer(
    particles: Sequence[Superparticle],
    indices: Sequence[int],
    out: SpMassTendencies,
    dt: float,
    sedimentation: Sedimentation,
    efficiencies: EfficiencyProvider,
    *,
    use_numba: bool | None = None,
) -> SpMassTendencies:
    """Run the collision engine on one layer and return ``out``.

    Layers with fewer than two particles are skipped without any work.
    """

    if len(particles) < 2:
        return out
    collider = Collider(
        particles, indices, out, dt, sedimentation, efficiencies, use_numba=use_numba
    )
    collider.calculate()
    return out
