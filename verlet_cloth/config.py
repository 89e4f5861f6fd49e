"""
Configuration dataclass for cloth simulation parameters.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import warp as wp

from .errors import InvalidTopology

DENSITIES = ("minimal", "rich")
SOLVERS = ("sequential", "colored")


@dataclass
class SimConfig:
    """Configuration for the cloth simulation.

    Coordinates are screen-like: x grows with the column, y grows downward with
    the row, gravity pulls toward +y and the floor is a maximum y.

    Attributes:
        rows: Number of particle rows. Row 0 is the pinned top row.
        cols: Number of particle columns.
        spacing: Distance between adjacent particles in the initial grid.
        origin: (x, y) position of the particle at row 0, column 0.
        g: Gravitational acceleration.
        dt: Fixed frame interval. Gravity is applied as g * dt**2 per step.
        damping: Fraction of the implicit velocity removed each step (0 = none).
        iterations: Constraint relaxation passes per step.
        floor_y: Floor boundary. None disables floor collision.
        density: "minimal" (structural links) or "rich" (structural + shear + bend).
        rest_growth: Non-negative amount added to every rest length each step (0 = fixed).
        rest_cap: Upper bound for grown rest lengths. None means unbounded.
        perturb_interval: Accumulated integration updates between random
            disturbances. None disables them.
        perturb_magnitude: Displacement applied by a disturbance.
        seed: Seed for the disturbance random generator.
        solver: "sequential" Gauss-Seidel or the "colored" batched variant.
        steps: Default number of steps for ``ClothSimulator.run``.
        device: Warp device to use ('cpu' or 'cuda:0', etc.).
    """

    rows: int = 20
    cols: int = 20
    spacing: float = 0.05
    origin: Tuple[float, float] = (0.0, 0.0)
    g: float = 9.81
    dt: float = 1.0 / 60.0
    damping: float = 0.01
    iterations: int = 5
    floor_y: Optional[float] = 1.5
    density: str = "minimal"
    rest_growth: float = 0.0
    rest_cap: Optional[float] = None
    perturb_interval: Optional[int] = None
    perturb_magnitude: float = 0.1
    seed: Optional[int] = None
    solver: str = "sequential"
    steps: int = 600
    device: Optional[str] = None

    def __post_init__(self):
        """Validate parameters, initialize warp and pick a device if not specified."""
        if self.dt <= 0:
            raise ValueError(f"dt must be positive, got {self.dt}")
        if self.iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {self.iterations}")
        if not 0.0 <= self.damping < 1.0:
            raise ValueError(f"damping must be in [0, 1), got {self.damping}")
        if self.perturb_interval is not None and self.perturb_interval <= 0:
            raise ValueError(
                f"perturb_interval must be positive or None, got {self.perturb_interval}"
            )
        if self.rest_growth < 0:
            raise ValueError(f"rest_growth must be non-negative, got {self.rest_growth}")
        if self.perturb_magnitude < 0:
            raise ValueError(
                f"perturb_magnitude must be non-negative, got {self.perturb_magnitude}"
            )
        if self.solver not in SOLVERS:
            raise ValueError(f"solver must be one of {SOLVERS}, got {self.solver!r}")
        if self.density not in DENSITIES:
            raise InvalidTopology(
                f"density must be one of {DENSITIES}, got {self.density!r}"
            )

        wp.init()
        if self.device is None:
            self.device = str(wp.get_device())

    @property
    def num_points(self) -> int:
        """Total number of particles in the cloth."""
        return self.rows * self.cols

    @property
    def gravity_delta(self) -> float:
        """Per-step positional change due to gravity (g * dt**2)."""
        return self.g * self.dt * self.dt

    @property
    def wp_device(self):
        """Get the warp device object."""
        return wp.get_device(self.device)
