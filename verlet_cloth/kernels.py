"""
Warp kernels for cloth simulation.

Positions use screen-like coordinates (y grows downward). Pinned particles
(mask value 1) are never written by any kernel.

Note: Kernels must be defined at module level (not inside classes) per Warp requirements.
"""

import warp as wp

# Nothing here is differentiated, skip generating adjoints.
wp.set_module_options({"enable_backward": False})


@wp.func
def project_distance(
    pos: wp.array(dtype=wp.vec2),
    pinned: wp.array(dtype=wp.int32),
    i: int,
    j: int,
    rest_length: float,
):
    """Move the endpoints of one constraint toward its rest length.

    Each free endpoint moves by half of ``(length - rest) / length`` of the
    separation vector, toward the other endpoint. A pinned endpoint still
    defines the separation but is not moved. Zero-length constraints are
    skipped.
    """
    delta = pos[j] - pos[i]
    length = wp.length(delta)
    if length > 0.0:
        correction = delta * (0.5 * (length - rest_length) / length)
        if pinned[i] == 0:
            pos[i] = pos[i] + correction
        if pinned[j] == 0:
            pos[j] = pos[j] - correction


@wp.kernel
def integrate_verlet(
    pos: wp.array(dtype=wp.vec2),
    prev: wp.array(dtype=wp.vec2),
    pinned: wp.array(dtype=wp.int32),
    gravity: wp.vec2,
    damping: float,
    floor_y: float,
):
    """Advance particle positions with position Verlet.

    new = pos + (pos - prev) * (1 - damping) + gravity

    The previous position becomes the pre-update position. The vertical
    coordinate is clamped to the floor without touching ``prev``, so a particle
    that hits the floor loses its downward velocity instead of bouncing.

    Args:
        pos: Particle positions (modified in place).
        prev: Particle positions at the previous step (modified in place).
        pinned: Pin mask (1 = pinned, 0 = free).
        gravity: Per-step gravity displacement (g * dt**2 along +y).
        damping: Fraction of implicit velocity removed per step.
        floor_y: Maximum y a free particle may reach.
    """
    i = wp.tid()

    # Pinned particles don't move
    if pinned[i] == 1:
        return

    current = pos[i]
    moved = current + (current - prev[i]) * (1.0 - damping) + gravity
    prev[i] = current
    pos[i] = wp.vec2(moved[0], wp.min(moved[1], floor_y))


@wp.kernel
def relax_sequential(
    pos: wp.array(dtype=wp.vec2),
    edges: wp.array2d(dtype=wp.int32),
    rest: wp.array(dtype=wp.float32),
    pinned: wp.array(dtype=wp.int32),
    iterations: int,
):
    """Gauss-Seidel relaxation over every constraint, in order.

    Each correction is visible to the constraints after it in the same pass.
    Should be launched with dim=1 (single thread).
    """
    for _it in range(iterations):
        for e in range(edges.shape[0]):
            project_distance(pos, pinned, edges[e, 0], edges[e, 1], rest[e])


@wp.kernel
def relax_batch(
    pos: wp.array(dtype=wp.vec2),
    edges: wp.array2d(dtype=wp.int32),
    rest: wp.array(dtype=wp.float32),
    pinned: wp.array(dtype=wp.int32),
    batch: wp.array(dtype=wp.int32),
):
    """Relax one batch of constraints that share no endpoints, one thread each."""
    t = wp.tid()
    e = batch[t]
    project_distance(pos, pinned, edges[e, 0], edges[e, 1], rest[e])


@wp.kernel
def grow_rest_lengths(
    rest: wp.array(dtype=wp.float32),
    delta: float,
    cap: float,
):
    """rest = min(cap, rest + delta) for every constraint."""
    e = wp.tid()
    rest[e] = wp.min(cap, rest[e] + delta)


@wp.kernel
def displace_point(
    pos: wp.array(dtype=wp.vec2),
    index: int,
    offset: wp.vec2,
):
    """Shift a single particle. Should be launched with dim=1."""
    pos[index] = pos[index] + offset


@wp.kernel
def collide_floor(
    pos: wp.array(dtype=wp.vec2),
    pinned: wp.array(dtype=wp.int32),
    floor_y: float,
):
    """Clamp free particles that ended up below the floor back onto it."""
    i = wp.tid()

    if pinned[i] == 1:
        return

    p = pos[i]
    pos[i] = wp.vec2(p[0], wp.min(p[1], floor_y))
