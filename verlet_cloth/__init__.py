"""
Verlet Cloth Package

A 2D cloth simulation using position-based Verlet integration and iterative
Gauss-Seidel constraint relaxation, with per-step kernels written in NVIDIA Warp.
"""

from .config import SimConfig
from .errors import ClothSimError, InvalidTopology
from .geometry import (
    Topology,
    build_topology,
    color_constraints,
    expected_constraint_count,
    make_edges,
    make_edges_and_rests,
    make_grid_positions,
    make_pins,
)
from .simulation import ClothSimulator
from .visualization import (
    animate_cloth,
    draw_cloth,
    live_view,
    plot_particle_over_time,
    plot_trajectories,
)

__all__ = [
    "SimConfig",
    "ClothSimError",
    "InvalidTopology",
    "Topology",
    "build_topology",
    "color_constraints",
    "expected_constraint_count",
    "make_edges",
    "make_edges_and_rests",
    "make_grid_positions",
    "make_pins",
    "ClothSimulator",
    "animate_cloth",
    "draw_cloth",
    "live_view",
    "plot_particle_over_time",
    "plot_trajectories",
]
