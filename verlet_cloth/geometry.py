"""
Cloth geometry creation functions.

These functions create the initial particle positions, constraint
connectivity, rest lengths, and pin mask for the cloth simulation.

Particles are indexed row-major: ``index = row * cols + col``. Row 0 is the
top row and is pinned.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .config import DENSITIES, SimConfig
from .errors import InvalidTopology


def validate_grid(rows: int, cols: int, spacing: float):
    """Reject degenerate grid parameters.

    Raises:
        InvalidTopology: If the grid has fewer than two rows or columns, or
            the spacing is not positive.
    """
    if rows < 2 or cols < 2:
        raise InvalidTopology(f"grid must be at least 2x2, got {rows}x{cols}")
    if not spacing > 0:
        raise InvalidTopology(f"spacing must be positive, got {spacing}")


def point_index(row: int, col: int, cols: int) -> int:
    """Flat index of the particle at (row, col)."""
    return row * cols + col


def make_grid_positions(config: SimConfig) -> np.ndarray:
    """Create initial grid positions for cloth particles.

    Particles are arranged in a regular grid hanging down from ``config.origin``.

    Args:
        config: Simulation configuration.

    Returns:
        Array of shape (num_points, 2) containing 2D positions.
    """
    rows, cols, dx = config.rows, config.cols, config.spacing
    validate_grid(rows, cols, dx)
    x0, y0 = config.origin

    x = np.zeros((rows * cols, 2), dtype=np.float32)
    for r in range(rows):
        for c in range(cols):
            idx = point_index(r, c, cols)
            x[idx, 0] = x0 + c * dx
            x[idx, 1] = y0 + r * dx

    return x


def make_edges(rows: int, cols: int, density: str = "minimal") -> np.ndarray:
    """Create constraint connectivity for a rows x cols grid.

    Links are emitted per particle in row-major order. For each particle the
    order is: right, down, then (rich only) the two shear diagonals of the cell
    below-right, bend-right and bend-down. A link is only emitted when both
    endpoints lie inside the grid.

    Args:
        rows: Number of particle rows.
        cols: Number of particle columns.
        density: "minimal" for structural links, "rich" to add shear and bend.

    Returns:
        Array of shape (num_constraints, 2) with particle indices.
    """
    if density not in DENSITIES:
        raise InvalidTopology(f"density must be one of {DENSITIES}, got {density!r}")
    rich = density == "rich"

    edges = []
    for r in range(rows):
        for c in range(cols):
            curr = point_index(r, c, cols)
            # Structural
            if c + 1 < cols:
                edges.append((curr, curr + 1))
            if r + 1 < rows:
                edges.append((curr, point_index(r + 1, c, cols)))

            if not rich:
                continue

            # Shear
            if c + 1 < cols and r + 1 < rows:
                edges.append((curr, point_index(r + 1, c + 1, cols)))
                edges.append((point_index(r + 1, c, cols), curr + 1))
            # Bend
            if c + 2 < cols:
                edges.append((curr, curr + 2))
            if r + 2 < rows:
                edges.append((curr, point_index(r + 2, c, cols)))

    return np.array(edges, dtype=np.int32).reshape(-1, 2)


def make_rest_lengths(positions: np.ndarray, edges: np.ndarray) -> np.ndarray:
    """Rest length of each constraint, taken from the initial endpoint distance."""
    rest_lengths = np.zeros(edges.shape[0], dtype=np.float32)
    for e, (a, b) in enumerate(edges):
        rest_lengths[e] = np.linalg.norm(positions[b] - positions[a])
    return rest_lengths


def make_edges_and_rests(
    config: SimConfig, positions: Optional[np.ndarray] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """Create constraint connectivity and rest lengths.

    Args:
        config: Simulation configuration.
        positions: Initial positions to measure rest lengths from. Defaults to
            the regular grid from ``make_grid_positions``.

    Returns:
        Tuple of:
            - edges: Array of shape (num_constraints, 2) with particle indices.
            - rest_lengths: Array of shape (num_constraints,) with rest lengths.
    """
    if positions is None:
        positions = make_grid_positions(config)
    edges = make_edges(config.rows, config.cols, config.density)
    return edges, make_rest_lengths(positions, edges)


def make_pins(config: SimConfig) -> np.ndarray:
    """Create pin mask for the cloth.

    The whole top row (row 0) is pinned.

    Returns:
        Array of shape (num_points,) with 1 for pinned, 0 for free.
    """
    pins = np.zeros(config.num_points, dtype=np.int32)
    pins[: config.cols] = 1
    return pins


def expected_constraint_count(rows: int, cols: int, density: str = "minimal") -> int:
    """Number of constraints ``make_edges`` produces for the given grid."""
    count = 2 * rows * cols - rows - cols
    if density == "rich":
        count += 2 * max(rows - 1, 0) * max(cols - 1, 0)
        count += rows * max(cols - 2, 0) + cols * max(rows - 2, 0)
    return count


@dataclass
class Topology:
    """Particles and constraints of a cloth, before they are handed to warp.

    Attributes:
        positions: (num_points, 2) float32 initial positions.
        pinned: (num_points,) int32 pin mask.
        edges: (num_constraints, 2) int32 endpoint indices.
        rest_lengths: (num_constraints,) float32 rest lengths.
        rows: Grid rows, or 0 for a topology that is not a grid.
        cols: Grid columns, or 0 for a topology that is not a grid.
    """

    positions: np.ndarray
    pinned: np.ndarray
    edges: np.ndarray
    rest_lengths: np.ndarray
    rows: int = 0
    cols: int = 0

    @property
    def num_points(self) -> int:
        return self.positions.shape[0]

    @property
    def num_constraints(self) -> int:
        return self.edges.shape[0]


def build_topology(config: SimConfig, positions: Optional[np.ndarray] = None) -> Topology:
    """Build the full cloth topology described by ``config``.

    Args:
        config: Simulation configuration.
        positions: Optional non-uniform initial layout of shape (num_points, 2).
            Rest lengths are measured from it.

    Raises:
        InvalidTopology: On degenerate grid parameters or a layout of the
            wrong shape.
    """
    validate_grid(config.rows, config.cols, config.spacing)
    if positions is None:
        positions = make_grid_positions(config)
    else:
        positions = np.asarray(positions, dtype=np.float32)
        if positions.shape != (config.num_points, 2):
            raise InvalidTopology(
                f"positions must have shape ({config.num_points}, 2), got {positions.shape}"
            )

    edges, rest_lengths = make_edges_and_rests(config, positions)
    topology = Topology(
        positions=positions.copy(),
        pinned=make_pins(config),
        edges=edges,
        rest_lengths=rest_lengths,
        rows=config.rows,
        cols=config.cols,
    )
    check_topology(topology)
    return topology


def check_topology(topology: Topology):
    """Verify array shapes and that every constraint joins two distinct, valid points.

    Raises:
        InvalidTopology: If any check fails.
    """
    n = topology.positions.shape[0] if topology.positions.ndim == 2 else -1
    if n < 1 or topology.positions.shape[1] != 2:
        raise InvalidTopology(f"positions must have shape (n, 2), got {topology.positions.shape}")
    if topology.pinned.shape != (n,):
        raise InvalidTopology(f"pin mask must have shape ({n},), got {topology.pinned.shape}")
    if not np.isin(topology.pinned, (0, 1)).all():
        raise InvalidTopology("pin mask values must be 0 (free) or 1 (pinned)")

    edges = topology.edges
    if edges.ndim != 2 or edges.shape[1] != 2:
        raise InvalidTopology(f"edges must have shape (m, 2), got {edges.shape}")
    if topology.rest_lengths.shape != (edges.shape[0],):
        raise InvalidTopology(
            f"rest lengths must have shape ({edges.shape[0]},), got {topology.rest_lengths.shape}"
        )
    if edges.size:
        if edges.min() < 0 or edges.max() >= n:
            raise InvalidTopology(f"constraint endpoint out of range [0, {n})")
        loops = np.flatnonzero(edges[:, 0] == edges[:, 1])
        if loops.size:
            raise InvalidTopology(f"constraint {int(loops[0])} connects a point to itself")


def color_constraints(edges: np.ndarray, num_points: int) -> List[np.ndarray]:
    """Partition constraints into batches with no shared endpoints.

    Greedy coloring in emission order: each constraint goes into the first
    batch where neither endpoint is already used. Constraints inside a batch
    can be relaxed in parallel without write conflicts.

    Returns:
        List of int32 arrays of constraint indices, in ascending order within
        each batch.
    """
    batches: List[List[int]] = []
    used: List[np.ndarray] = []

    for e, (a, b) in enumerate(edges):
        for batch, mask in zip(batches, used):
            if not mask[a] and not mask[b]:
                break
        else:
            batch, mask = [], np.zeros(num_points, dtype=bool)
            batches.append(batch)
            used.append(mask)
        batch.append(e)
        mask[a] = True
        mask[b] = True

    return [np.array(batch, dtype=np.int32) for batch in batches]
