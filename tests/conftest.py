import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from verlet_cloth import SimConfig


def make_config(**overrides):
    """Small CPU configuration used throughout the tests."""
    params = dict(
        rows=3,
        cols=3,
        spacing=0.1,
        g=9.81,
        dt=1.0 / 60.0,
        damping=0.02,
        iterations=5,
        floor_y=None,
        device="cpu",
    )
    params.update(overrides)
    return SimConfig(**params)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def free_rows():
    """Select the non-pinned particles of a trajectory or position array."""

    def select(positions, pins):
        return np.asarray(positions)[..., pins == 0, :]

    return select
