import matplotlib.pyplot as plt
import numpy as np

from conftest import make_config
from verlet_cloth import ClothSimulator
from verlet_cloth.visualization import (
    animate_cloth,
    constraint_segments,
    draw_cloth,
    live_view,
    plot_particle_over_time,
    plot_trajectories,
)


def test_constraint_segments():
    positions = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 2.0]], dtype=np.float32)
    edges = np.array([[0, 1], [0, 2]], dtype=np.int32)

    segments = constraint_segments(positions, edges)
    assert segments.shape == (2, 2, 2)
    assert segments[1].tolist() == [[0.0, 0.0], [0.0, 2.0]]


def test_draw_cloth_uses_screen_coordinates():
    sim = ClothSimulator(make_config())
    fig, ax = plt.subplots()

    lines = draw_cloth(ax, sim.get_positions(), sim.get_edges(), sim.get_pins())
    assert len(lines.get_segments()) == sim.num_constraints
    bottom, top = ax.get_ylim()
    assert bottom > top
    plt.close(fig)


def test_animate_cloth_without_saving():
    sim = ClothSimulator(make_config())
    trajectory = sim.run(5)

    anim = animate_cloth(trajectory, sim.get_edges(), sim.get_pins())
    assert anim is not None
    plt.close("all")


def test_live_view_steps_simulator():
    sim = ClothSimulator(make_config())
    anim = live_view(sim, frames=3)
    before = sim.step_count

    # Drive two frames by hand, the way the event loop would
    anim._func(0)
    anim._func(1)
    assert sim.step_count == before + 2
    plt.close("all")


def test_trajectory_plots():
    sim = ClothSimulator(make_config(floor_y=0.5))
    trajectory = sim.run(10)

    fig = plot_trajectories(trajectory)
    assert fig.axes
    fig2 = plot_particle_over_time(trajectory, 4, floor_y=0.5)
    assert len(fig2.axes) == 2
    plt.close("all")
