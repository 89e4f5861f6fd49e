import pytest

from conftest import make_config
from verlet_cloth import InvalidTopology, SimConfig


def test_defaults():
    config = SimConfig(device="cpu")
    assert config.iterations == 5
    assert config.density == "minimal"
    assert config.solver == "sequential"
    assert config.num_points == 400
    assert config.perturb_interval is None


def test_device_is_resolved():
    config = SimConfig()
    assert config.device is not None
    assert config.wp_device is not None


def test_gravity_delta_uses_squared_time_step():
    config = make_config(g=10.0, dt=0.1)
    assert config.gravity_delta == pytest.approx(0.1)


@pytest.mark.parametrize(
    "overrides",
    [
        dict(dt=0.0),
        dict(dt=-1.0),
        dict(iterations=-1),
        dict(damping=1.0),
        dict(damping=-0.1),
        dict(perturb_interval=0),
        dict(perturb_magnitude=-1.0),
        dict(rest_growth=-0.01),
        dict(solver="jacobi"),
    ],
)
def test_invalid_parameters(overrides):
    with pytest.raises(ValueError):
        make_config(**overrides)


def test_invalid_density_is_topology_error():
    with pytest.raises(InvalidTopology):
        make_config(density="full")
