#!/usr/bin/env python3
"""
Main entry point for cloth simulation.

Usage:
    python main.py simulate --rows 20 --cols 20 --density rich --animate
    python main.py live --perturb-interval 5000 --seed 7
"""

import argparse
import logging
import sys

from verlet_cloth import (
    SimConfig,
    ClothSimulator,
    InvalidTopology,
    animate_cloth,
    live_view,
    plot_particle_over_time,
    plot_trajectories,
)


def add_config_arguments(parser):
    """Options shared by every command; they map one-to-one onto SimConfig."""
    # Grid parameters
    parser.add_argument("--rows", type=int, default=20, help="Grid rows")
    parser.add_argument("--cols", type=int, default=20, help="Grid columns")
    parser.add_argument("--spacing", type=float, default=0.05, help="Particle spacing")
    parser.add_argument(
        "--origin", type=float, nargs=2, default=(0.0, 0.0), metavar=("X", "Y"),
        help="Position of the top-left particle",
    )
    parser.add_argument(
        "--density", choices=("minimal", "rich"), default="minimal",
        help="Constraint set: structural only, or structural + shear + bend",
    )

    # Physics parameters
    parser.add_argument("--g", type=float, default=9.81, help="Gravity")
    parser.add_argument("--dt", type=float, default=1.0 / 60.0, help="Frame interval")
    parser.add_argument("--damping", type=float, default=0.01, help="Velocity damping per step")
    parser.add_argument("--floor", type=float, default=1.5, help="Floor y (screen coordinates)")
    parser.add_argument("--no-floor", action="store_true", help="Disable floor collision")
    parser.add_argument("--rest-growth", type=float, default=0.0, help="Rest length growth per step")
    parser.add_argument("--rest-cap", type=float, default=None, help="Rest length growth cap")

    # Solver parameters
    parser.add_argument("--iterations", type=int, default=5, help="Relaxation passes per step")
    parser.add_argument(
        "--solver", choices=("sequential", "colored"), default="sequential",
        help="Gauss-Seidel order, or batched parallel relaxation",
    )

    # Disturbances
    parser.add_argument(
        "--perturb-interval", type=int, default=None,
        help="Integration updates between random disturbances",
    )
    parser.add_argument("--perturb-magnitude", type=float, default=0.1, help="Disturbance size")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for disturbances")

    parser.add_argument("--device", type=str, default=None, help="Warp device")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def config_from_args(args) -> SimConfig:
    """Build a SimConfig from parsed command-line arguments."""
    return SimConfig(
        rows=args.rows,
        cols=args.cols,
        spacing=args.spacing,
        origin=tuple(args.origin),
        g=args.g,
        dt=args.dt,
        damping=args.damping,
        iterations=args.iterations,
        floor_y=None if args.no_floor else args.floor,
        density=args.density,
        rest_growth=args.rest_growth,
        rest_cap=args.rest_cap,
        perturb_interval=args.perturb_interval,
        perturb_magnitude=args.perturb_magnitude,
        seed=args.seed,
        solver=args.solver,
        steps=getattr(args, "steps", 600),
        device=args.device,
    )


def run_simulate(args, simulator):
    """Run a headless simulation."""
    config = simulator.config
    print("=== Cloth Simulation ===")
    print(f"Config: {config.rows}x{config.cols} grid, density={config.density}, "
          f"iterations={config.iterations}, solver={config.solver}")
    print(f"Steps: {config.steps}, dt={config.dt:.6f}")
    print(f"Device: {config.device}")
    print(f"Points: {simulator.num_points}, constraints: {simulator.num_constraints}")

    print("Running simulation...")
    trajectory = simulator.run(record=True)
    print(f"Trajectory shape: {trajectory.shape}")
    if simulator.perturbations:
        print(f"Random disturbances applied: {simulator.perturbations}")

    if args.animate:
        print("Creating animation...")
        animate_cloth(trajectory, simulator.get_edges(), simulator.get_pins(),
                      path=args.animation_path)
        print(f"Animation saved to {args.animation_path}")

    if args.plot:
        import matplotlib.pyplot as plt

        plot_trajectories(trajectory)
        plt.savefig(args.plot_path)
        print(f"Trajectory plot saved to {args.plot_path}")

    if args.particle is not None:
        import matplotlib.pyplot as plt

        plot_particle_over_time(trajectory, args.particle, floor_y=config.floor_y)
        plt.savefig(args.particle_path)
        print(f"Particle {args.particle} plot saved to {args.particle_path}")

    print("Done!")
    return trajectory


def run_live(args, simulator):
    """Open a window and step the cloth once per frame."""
    import matplotlib.pyplot as plt

    print(f"Points: {simulator.num_points}, constraints: {simulator.num_constraints}")
    anim = live_view(simulator, frames=args.frames, interval=args.interval)
    plt.show()
    return anim


def build_parser():
    parser = argparse.ArgumentParser(
        description="Verlet cloth simulation with Gauss-Seidel constraint relaxation"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # --- Headless simulation ---
    sim_parser = subparsers.add_parser("simulate", help="Run a headless simulation")
    add_config_arguments(sim_parser)
    sim_parser.add_argument("--steps", type=int, default=600, help="Number of steps")
    sim_parser.add_argument("--animate", action="store_true", help="Save an animation")
    sim_parser.add_argument(
        "--animation-path", type=str, default="cloth_animation.gif", help="Animation output path"
    )
    sim_parser.add_argument("--plot", action="store_true", help="Plot particle trajectories")
    sim_parser.add_argument(
        "--plot-path", type=str, default="trajectories.png", help="Plot output path"
    )
    sim_parser.add_argument(
        "--particle", type=int, default=None, help="Plot x and y of one particle over time"
    )
    sim_parser.add_argument(
        "--particle-path", type=str, default="particle.png", help="Particle plot output path"
    )

    # --- Interactive window ---
    live_parser = subparsers.add_parser("live", help="Run the simulation in a window")
    add_config_arguments(live_parser)
    live_parser.add_argument("--frames", type=int, default=None, help="Stop after N frames")
    live_parser.add_argument("--interval", type=int, default=16, help="Frame delay in ms")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        simulator = ClothSimulator(config_from_args(args))
    except (InvalidTopology, ValueError) as exc:
        parser.error(str(exc))

    if args.command == "simulate":
        particle = args.particle
        if particle is not None and not 0 <= particle < simulator.num_points:
            parser.error(f"--particle must be in [0, {simulator.num_points}), got {particle}")
        return run_simulate(args, simulator)
    return run_live(args, simulator)


if __name__ == "__main__":
    main()
