"""Three droplet sizes in one layer with a unit collision efficiency."""

import math

import numpy as np
import pytest

from warmrain.grid import VerticalGrid
from warmrain.physics.strategies import HallCollisions
from warmrain.physics_step import advance, collision_step
from warmrain.superparticle import Superparticle


def _three_sizes(z=25.0):
    return [
        Superparticle.from_radius(10.0e-6, N=1000.0, z=z),
        Superparticle.from_radius(20.0e-6, N=500.0, z=z),
        Superparticle.from_radius(30.0e-6, N=100.0, z=z),
    ]


@pytest.fixture()
def strategy(sedimentation, unit_efficiency):
    return HallCollisions(sedimentation, unit_efficiency)


def test_three_sizes_one_layer(strategy):
    sps = _three_sizes()
    out = collision_step(sps, VerticalGrid.uniform(50.0, 50.0), 1.0, strategy)

    assert out[2].dN == 0
    assert out[2].dqc >= 0.0
    # Expected losses are well below one droplet, floor turns them into -1.
    assert out[0].dN == -1
    assert out[1].dN == -1
    assert out[0].dqc < 0.0
    assert out[1].dqc < 0.0


def test_lonely_particle_has_zero_tendency(strategy):
    sps = _three_sizes(z=10.0) + [Superparticle.from_radius(10.0e-6, N=1000.0, z=75.0)]
    out = collision_step(sps, VerticalGrid.uniform(100.0, 50.0), 1.0, strategy)
    assert out[3].dqc == 0.0
    assert out[3].dN == 0


def test_largest_particle_grows(strategy):
    sps = _three_sizes()
    updated = advance(sps, VerticalGrid.uniform(50.0, 50.0), 1.0, strategy)
    assert updated[2].N == sps[2].N
    assert updated[2].radius > sps[2].radius
    assert updated[0].N == sps[0].N - 1


def test_several_steps_keep_multiplicities_positive(strategy):
    grid = VerticalGrid.uniform(50.0, 50.0)
    sps = _three_sizes()
    for _ in range(20):
        sps = advance(sps, grid, 1.0, strategy)
    assert all(sp.N > 0.0 for sp in sps)
    assert all(math.isfinite(sp.qc) for sp in sps)
    assert sps[2].N == 100.0
    assert np.all(np.diff([sp.N for sp in sps]) < 0.0)
