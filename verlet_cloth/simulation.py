"""
Cloth simulator class for running forward simulations.
"""

import logging
import math
from typing import Optional

import numpy as np
import warp as wp

from .config import SimConfig
from .geometry import Topology, build_topology, check_topology, color_constraints
from . import kernels

logger = logging.getLogger(__name__)

# Stand-in floor when floor collision is disabled.
NO_FLOOR = 1.0e30


class ClothSimulator:
    """Position-based cloth simulator using Warp kernels.

    Owns the particle arrays, the constraint arrays, the step counters and the
    random generator used for disturbances. Each ``step()`` runs, in order:

    1. Verlet integration of free particles (with floor clamping).
    2. Rest-length growth, if ``config.rest_growth`` is non-zero.
    3. ``config.iterations`` passes of constraint relaxation.
    4. One random disturbance per ``config.perturb_interval`` accumulated
       integration updates (one update per free particle per step).
    5. Floor collision.

    Positions should only be read between steps, through the ``get_*``
    accessors, which return copies.

    Attributes:
        config: Simulation configuration.
        topology: Initial particles and constraints.
        pos: Current particle positions (warp array).
        prev: Particle positions at the previous step (warp array).
        edges: Constraint endpoint indices (warp array).
        rest: Constraint rest lengths (warp array).
        pins: Pin mask (warp array).
    """

    def __init__(self, config: SimConfig, topology: Optional[Topology] = None):
        """Initialize the cloth simulator.

        Args:
            config: Simulation configuration.
            topology: Prebuilt particles and constraints. If None, the grid
                described by ``config`` is built.

        Raises:
            InvalidTopology: If the grid parameters or the given topology are
                malformed.
        """
        self.config = config
        self._device = config.wp_device

        if topology is None:
            topology = build_topology(config)
        else:
            check_topology(topology)
        self.topology = topology

        free = np.flatnonzero(topology.pinned == 0)
        self._free_indices = free.astype(np.int32)
        self._floor = NO_FLOOR if config.floor_y is None else float(config.floor_y)
        self._rest_cap = math.inf if config.rest_cap is None else float(config.rest_cap)

        self._init_arrays()
        self._batches = []
        if config.solver == "colored":
            self._batches = [
                wp.array(batch, dtype=wp.int32, device=self._device)
                for batch in color_constraints(topology.edges, topology.num_points)
            ]

        self._reset_counters()
        logger.info(
            "Built cloth with %d points (%d pinned) and %d constraints, solver=%s, device=%s",
            self.num_points,
            self.num_points - len(self._free_indices),
            self.num_constraints,
            config.solver,
            config.device,
        )

    def _init_arrays(self):
        """Transfer the topology to warp arrays."""
        device = self._device
        topology = self.topology

        self.pos = wp.array(topology.positions, dtype=wp.vec2, device=device)
        self.prev = wp.array(topology.positions, dtype=wp.vec2, device=device)
        self.edges = wp.array(topology.edges, dtype=wp.int32, device=device)
        self.rest = wp.array(topology.rest_lengths, dtype=wp.float32, device=device)
        self.pins = wp.array(topology.pinned, dtype=wp.int32, device=device)

    def _reset_counters(self):
        self._step_count = 0
        self._updates = 0
        self._perturbations = 0
        self._rng = np.random.default_rng(self.config.seed)

    @property
    def num_points(self) -> int:
        return self.topology.num_points

    @property
    def num_constraints(self) -> int:
        return self.topology.num_constraints

    @property
    def step_count(self) -> int:
        """Number of completed steps since construction or the last reset."""
        return self._step_count

    @property
    def perturbations(self) -> int:
        """Number of random disturbances applied so far."""
        return self._perturbations

    def reset(self):
        """Reset simulation to initial state, including the random generator."""
        self._init_arrays()
        self._reset_counters()

    def integrate(self):
        """Verlet-integrate every free particle once."""
        config = self.config
        wp.launch(
            kernels.integrate_verlet,
            dim=self.num_points,
            inputs=[
                self.pos,
                self.prev,
                self.pins,
                wp.vec2(0.0, config.gravity_delta),
                float(config.damping),
                self._floor,
            ],
            device=self._device,
        )
        self._updates += len(self._free_indices)

    def grow_rest_lengths(self):
        """Apply ``rest = min(rest_cap, rest + rest_growth)`` to every constraint."""
        if self.num_constraints == 0:
            return
        wp.launch(
            kernels.grow_rest_lengths,
            dim=self.num_constraints,
            inputs=[self.rest, float(self.config.rest_growth), self._rest_cap],
            device=self._device,
        )

    def relax(self, passes: Optional[int] = None):
        """Run constraint relaxation.

        Args:
            passes: Number of passes. If None, uses ``config.iterations``.
        """
        if passes is None:
            passes = self.config.iterations
        if passes <= 0 or self.num_constraints == 0:
            return

        if self.config.solver == "sequential":
            wp.launch(
                kernels.relax_sequential,
                dim=1,
                inputs=[self.pos, self.edges, self.rest, self.pins, int(passes)],
                device=self._device,
            )
            return

        for _ in range(passes):
            for batch in self._batches:
                wp.launch(
                    kernels.relax_batch,
                    dim=batch.shape[0],
                    inputs=[self.pos, self.edges, self.rest, self.pins, batch],
                    device=self._device,
                )

    def perturb(self):
        """Displace one randomly chosen free particle in a random direction."""
        if len(self._free_indices) == 0:
            return
        index = int(self._rng.choice(self._free_indices))
        angle = self._rng.uniform(0.0, 2.0 * math.pi)
        magnitude = self.config.perturb_magnitude
        offset = (magnitude * math.cos(angle), magnitude * math.sin(angle))

        logger.debug("Displacing point %d by (%.4f, %.4f)", index, offset[0], offset[1])
        wp.launch(
            kernels.displace_point,
            dim=1,
            inputs=[self.pos, index, wp.vec2(offset[0], offset[1])],
            device=self._device,
        )
        self._perturbations += 1

    def collide(self):
        """Clamp free particles onto the floor."""
        if self.config.floor_y is None:
            return
        wp.launch(
            kernels.collide_floor,
            dim=self.num_points,
            inputs=[self.pos, self.pins, self._floor],
            device=self._device,
        )

    def step(self):
        """Advance the cloth by one frame."""
        config = self.config

        self.integrate()
        if config.rest_growth != 0.0:
            self.grow_rest_lengths()
        self.relax()

        interval = config.perturb_interval
        if interval is not None:
            # Surplus updates carry over; a short interval can fire several times.
            while self._updates >= interval:
                self.perturb()
                self._updates -= interval

        self.collide()
        wp.synchronize_device(self._device)
        self._step_count += 1

    def run(
        self,
        steps: Optional[int] = None,
        record: bool = True,
    ) -> Optional[np.ndarray]:
        """Run simulation for multiple steps.

        Args:
            steps: Number of steps to run. If None, uses config.steps.
            record: Whether to record trajectory.

        Returns:
            If record=True, returns trajectory array of shape (steps, num_points, 2).
            Otherwise returns None.
        """
        if steps is None:
            steps = self.config.steps

        trajectory = [] if record else None

        for _ in range(steps):
            self.step()
            if record:
                trajectory.append(self.get_positions())

        if record:
            return np.array(trajectory).reshape(steps, self.num_points, 2)
        return None

    def get_positions(self) -> np.ndarray:
        """Get current positions as numpy array."""
        return self.pos.numpy().copy()

    def get_previous_positions(self) -> np.ndarray:
        """Get positions from the previous step as numpy array."""
        return self.prev.numpy().copy()

    def get_edges(self) -> np.ndarray:
        """Get constraint endpoint indices, shape (num_constraints, 2)."""
        return self.topology.edges.copy()

    def get_rest_lengths(self) -> np.ndarray:
        """Get current rest lengths (these change when rest_growth is set)."""
        return self.rest.numpy().copy()

    def get_pins(self) -> np.ndarray:
        """Get the pin mask (1 = pinned, 0 = free)."""
        return self.topology.pinned.copy()

    def get_free_mask(self) -> np.ndarray:
        """Get mask for free (non-pinned) particles.

        Returns:
            Array of shape (num_points,) with 1.0 for free, 0.0 for pinned.
        """
        return (1 - self.topology.pinned).astype(np.float32)
