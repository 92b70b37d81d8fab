"""Superparticle records and the per-particle tendency buffer.

A superparticle stands in for ``N`` physically identical droplets that share
a radius and a height.  Its state is immutable; collision processing returns
a separate :class:`SpMassTendencies` buffer aligned with the ensemble, which
the caller applies once the pass has completed.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, List, Sequence

import numpy as np
import pandas as pd

from .constants import PI, RHO_H2O

__all__ = [
    "Superparticle",
    "IndexedSuperparticle",
    "Tendency",
    "SpMassTendencies",
    "cloud_water",
    "droplet_radius",
    "apply_tendencies",
]


def cloud_water(N: float | np.ndarray, r: float | np.ndarray) -> float | np.ndarray:
    """Return the liquid water mass ``4/3 π ρ_w N r³`` of ``N`` droplets of radius ``r``."""

    return 4.0 / 3.0 * PI * RHO_H2O * N * r * r * r


def droplet_radius(qc: float, N: float) -> float:
    """Return the radius of droplets carrying ``qc`` liquid water in ``N`` droplets.

    Empty populations (``qc <= 0`` or ``N <= 0``) have radius zero.
    """

    if qc <= 0.0 or N <= 0.0:
        return 0.0
    return float((3.0 / (4.0 * PI) * qc / (RHO_H2O * N)) ** (1.0 / 3.0))


@dataclass(frozen=True)
class Superparticle:
    """Physical state of one computational droplet population.

    Attributes
    ----------
    qc:
        Liquid water mass of the whole population [kg].
    N:
        Multiplicity, i.e. the number of real droplets represented.
    z:
        Height [m]; only used to resolve layer membership.
    is_nucleated:
        Non-nucleated particles are excluded from collision processing.
    """

    qc: float
    N: float
    z: float
    is_nucleated: bool = True

    @property
    def radius(self) -> float:
        return droplet_radius(self.qc, self.N)

    @classmethod
    def from_radius(cls, r: float, N: float, z: float, is_nucleated: bool = True) -> "Superparticle":
        """Build a superparticle of ``N`` droplets with radius ``r`` [m]."""

        return cls(qc=float(cloud_water(N, r)), N=float(N), z=float(z), is_nucleated=is_nucleated)


@dataclass(frozen=True)
class IndexedSuperparticle:
    """A superparticle paired with its position in the original ensemble."""

    index: int
    sp: Superparticle


@dataclass(frozen=True)
class Tendency:
    dqc: float = 0.0
    dN: int = 0


class SpMassTendencies:
    """Pre-sized structure-of-arrays buffer of ``(dqc, dN)`` per superparticle.

    Entries are indexed by the original ensemble position and default to
    zero, so particles that never take part in a collision keep a zero
    tendency.
    """

    def __init__(self, dqc: np.ndarray, dN: np.ndarray) -> None:
        if dqc.shape != dN.shape or dqc.ndim != 1:
            raise ValueError("dqc and dN must be one-dimensional arrays of equal length")
        self.dqc = dqc
        self.dN = dN

    @classmethod
    def zeros(cls, n: int) -> "SpMassTendencies":
        return cls(dqc=np.zeros(int(n), dtype=np.float64), dN=np.zeros(int(n), dtype=np.int64))

    def __len__(self) -> int:
        return int(self.dqc.size)

    def __getitem__(self, index: int) -> Tendency:
        return Tendency(dqc=float(self.dqc[index]), dN=int(self.dN[index]))

    def __iter__(self) -> Iterator[Tendency]:
        for i in range(len(self)):
            yield self[i]

    def __repr__(self) -> str:
        return f"SpMassTendencies(n={len(self)}, total_dqc={self.total_dqc:g}, total_dN={int(self.dN.sum())})"

    @property
    def total_dqc(self) -> float:
        return float(np.sum(self.dqc))

    def is_zero(self) -> bool:
        return bool(np.all(self.dqc == 0.0) and np.all(self.dN == 0))

    def take(self, order: Sequence[int] | np.ndarray) -> "SpMassTendencies":
        """Return a copy re-ordered so that entry ``k`` is ``self[order[k]]``."""

        idx = np.asarray(order, dtype=np.int64)
        return SpMassTendencies(dqc=self.dqc[idx].copy(), dN=self.dN[idx].copy())

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"dqc": self.dqc, "dN": self.dN})


def apply_tendencies(sps: Sequence[Superparticle], tendencies: SpMassTendencies) -> List[Superparticle]:
    """Return a new ensemble with ``qc + dqc`` and ``N + dN`` applied per index."""

    if len(sps) != len(tendencies):
        raise ValueError(
            f"tendency length {len(tendencies)} does not match ensemble length {len(sps)}"
        )
    out: List[Superparticle] = []
    for sp, dqc, dN in zip(sps, tendencies.dqc, tendencies.dN):
        if dqc == 0.0 and dN == 0:
            out.append(sp)
            continue
        out.append(replace(sp, qc=sp.qc + float(dqc), N=sp.N + int(dN)))
    return out
