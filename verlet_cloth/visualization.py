"""
Visualization utilities for cloth simulation.

Positions are in screen-like coordinates, so every plot of the cloth itself
inverts the y axis.
"""

from typing import List, Optional

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation
from matplotlib.collections import LineCollection


def constraint_segments(positions: np.ndarray, edges: np.ndarray) -> np.ndarray:
    """Line segments for every constraint, shape (num_constraints, 2, 2)."""
    return positions[edges]


def draw_cloth(ax, positions, edges, pins=None, margin=0.1):
    """Draw the constraints as lines and the pinned particles as markers.

    Returns:
        The LineCollection added to ``ax``.
    """
    lines = LineCollection(constraint_segments(positions, edges), linewidths=0.8, colors="k")
    ax.add_collection(lines)
    if pins is not None and np.any(pins):
        pinned = positions[pins == 1]
        ax.scatter(pinned[:, 0], pinned[:, 1], s=12, c="tab:red", zorder=3)

    ax.set_xlim(positions[:, 0].min() - margin, positions[:, 0].max() + margin)
    ax.set_ylim(positions[:, 1].max() + margin, positions[:, 1].min() - margin)
    ax.set_aspect("equal")
    return lines


def animate_cloth(trajectory, edges, pins=None, path=None, interval=33):
    """Create an animation of the cloth from a recorded trajectory"""
    fig, ax = plt.subplots(figsize=(8, 8))
    lo = trajectory.reshape(-1, 2).min(axis=0) - 0.1
    hi = trajectory.reshape(-1, 2).max(axis=0) + 0.1

    def animate(frame):
        ax.clear()
        draw_cloth(ax, trajectory[frame], edges, pins)
        ax.set_xlim(lo[0], hi[0])
        ax.set_ylim(hi[1], lo[1])
        ax.set_title(f'Cloth Simulation - Frame {frame}/{len(trajectory)}')

    anim = animation.FuncAnimation(fig, animate, frames=len(trajectory),
                                   interval=interval, repeat=True)

    if path:
        writer = "pillow" if path.endswith(".gif") else "ffmpeg"
        anim.save(path, writer=writer)

    return anim


def live_view(simulator, frames=None, interval=16):
    """Drive ``simulator.step()`` once per animation frame and redraw the cloth.

    Args:
        simulator: A ClothSimulator.
        frames: Number of frames to run, or None to run until the window closes.
        interval: Delay between frames in milliseconds.

    Returns:
        The FuncAnimation (keep a reference to it while the window is open).
    """
    fig, ax = plt.subplots(figsize=(8, 8))
    edges = simulator.get_edges()
    pins = simulator.get_pins()
    lines = draw_cloth(ax, simulator.get_positions(), edges, pins, margin=0.5)
    floor_y = simulator.config.floor_y
    if floor_y is not None:
        ax.axhline(floor_y, color="0.6", linewidth=1.0)
    title = ax.set_title("Cloth Simulation - Frame 0")

    def update(_frame):
        simulator.step()
        lines.set_segments(constraint_segments(simulator.get_positions(), edges))
        title.set_text(f"Cloth Simulation - Frame {simulator.step_count}")
        return lines, title

    return animation.FuncAnimation(fig, update, frames=frames, interval=interval,
                                   blit=False, cache_frame_data=False)


def plot_trajectories(
    trajectory: np.ndarray,
    particle_indices: Optional[List[int]] = None,
    figsize: tuple = (12, 8),
) -> plt.Figure:
    """Plot the (x, y) path of sampled particles, with the frame number as the third axis.

    Pinned particles show up as vertical lines; free ones sag and swing.

    Args:
        trajectory: Array of shape (frames, num_points, 2) containing positions.
        particle_indices: Indices of particles to plot. If None, plots a sample.
        figsize: Figure size.

    Returns:
        The matplotlib figure.
    """
    if particle_indices is None:
        # Sample some particles across the cloth
        num_points = trajectory.shape[1]
        particle_indices = list(range(0, num_points, max(1, num_points // 10)))

    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(111, projection="3d")

    frames = np.arange(len(trajectory))

    for idx in particle_indices:
        x = trajectory[:, idx, 0]
        y = trajectory[:, idx, 1]
        ax.plot(x, y, frames, label=f"Particle {idx}", alpha=0.7)

    ax.set_xlabel("X Position")
    ax.set_ylabel("Y Position (down)")
    ax.set_zlabel("Time (frame)")
    ax.set_title("Particle Trajectories Over Time")
    ax.legend(loc="upper left", fontsize="small")

    return fig


def plot_particle_over_time(
    trajectory: np.ndarray,
    particle_index: int,
    floor_y: Optional[float] = None,
    figsize: tuple = (12, 4),
) -> plt.Figure:
    """Plot x and y position of a single particle over time.

    Args:
        trajectory: Array of shape (frames, num_points, 2) containing positions.
        particle_index: Index of the particle to plot.
        floor_y: If given, drawn as a reference line on the y plot.
        figsize: Figure size.

    Returns:
        The matplotlib figure.
    """
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    frames = np.arange(len(trajectory))
    x = trajectory[:, particle_index, 0]
    y = trajectory[:, particle_index, 1]

    ax1.plot(frames, x)
    ax1.set_xlabel("Time (frame)")
    ax1.set_ylabel("X Position")
    ax1.set_title(f"Particle {particle_index} - X Position")
    ax1.grid(True, alpha=0.3)

    ax2.plot(frames, y)
    if floor_y is not None:
        ax2.axhline(floor_y, color="0.6", linestyle="--", label="floor")
        ax2.legend()
    ax2.invert_yaxis()
    ax2.set_xlabel("Time (frame)")
    ax2.set_ylabel("Y Position (down)")
    ax2.set_title(f"Particle {particle_index} - Y Position")
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig
