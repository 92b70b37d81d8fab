import math
from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from warmrain.constants import PI, RHO_H2O
from warmrain.superparticle import (
    SpMassTendencies,
    Superparticle,
    Tendency,
    apply_tendencies,
    cloud_water,
)


def test_radius_round_trip():
    sp = Superparticle.from_radius(12.0e-6, N=250.0, z=40.0)
    assert sp.radius == pytest.approx(12.0e-6, rel=1e-12)
    assert sp.qc == pytest.approx(4.0 / 3.0 * PI * RHO_H2O * 250.0 * (12.0e-6) ** 3)


def test_empty_population_has_zero_radius():
    assert Superparticle(qc=1.0e-12, N=0.0, z=0.0).radius == 0.0
    assert Superparticle(qc=0.0, N=10.0, z=0.0).radius == 0.0


def test_cloud_water_is_vectorised():
    r = np.array([1.0e-6, 2.0e-6])
    out = cloud_water(np.array([1.0, 1.0]), r)
    assert out[1] / out[0] == pytest.approx(8.0)


def test_tendency_buffer_defaults_to_zero():
    buf = SpMassTendencies.zeros(4)
    assert len(buf) == 4
    assert buf.is_zero()
    assert buf[2] == Tendency(0.0, 0)
    assert list(buf) == [Tendency()] * 4
    frame = buf.to_frame()
    assert list(frame.columns) == ["dqc", "dN"]


def test_tendency_buffer_rejects_mismatched_arrays():
    with pytest.raises(ValueError):
        SpMassTendencies(dqc=np.zeros(3), dN=np.zeros(2, dtype=np.int64))


def test_take_reorders_entries():
    buf = SpMassTendencies(dqc=np.array([1.0, 2.0, 3.0]), dN=np.array([0, -1, -2]))
    out = buf.take([2, 0, 1])
    assert out.dqc.tolist() == [3.0, 1.0, 2.0]
    assert out.dN.tolist() == [-2, 0, -1]


def test_apply_tendencies_returns_new_records():
    sps = [Superparticle(qc=1.0, N=10.0, z=0.0), Superparticle(qc=2.0, N=5.0, z=1.0)]
    buf = SpMassTendencies(dqc=np.array([0.5, 0.0]), dN=np.array([-2, 0]))
    out = apply_tendencies(sps, buf)
    assert out[0].qc == 1.5 and out[0].N == 8.0
    assert out[1] is sps[1]
    assert sps[0].qc == 1.0


def test_apply_tendencies_length_mismatch():
    with pytest.raises(ValueError, match="does not match"):
        apply_tendencies([Superparticle(qc=1.0, N=1.0, z=0.0)], SpMassTendencies.zeros(2))


def test_superparticle_is_immutable():
    sp = Superparticle(qc=1.0, N=1.0, z=0.0)
    with pytest.raises(FrozenInstanceError):
        sp.qc = 2.0  # type: ignore[misc]
    assert math.isfinite(sp.radius)
