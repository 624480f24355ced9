#!/usr/bin/env python3
"""
Galaxy Collision Simulator

A real-time simulation of colliding galaxies using JAX for physics
calculations and Vispy for visualization.

Usage:
    python main.py                      # Start with 3 galaxies
    python main.py --galaxies 7         # Start with 7 galaxies
    python main.py --headless 2000      # Run 2000 steps without a window
"""

import argparse
import time

import numpy as np

from galaxy_collision.config import (
    GALAXY_COUNT,
    MAX_STARS,
    DELTAT,
    MAX_LIFETIME,
    MIN_DISTANCE,
    PRECISION,
    COUPLING,
    HELP_CONTENT,
)

# Note: visualization.renderer is imported lazily in main() to avoid
# loading graphics libraries when only --help or --headless is requested


def positive_int(value: str) -> int:
    """argparse type for integers >= 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Galaxy Collision Simulator - colliding disk galaxies',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=HELP_CONTENT,
    )
    parser.add_argument(
        '--galaxies',
        '-g',
        type=positive_int,
        default=GALAXY_COUNT,
        metavar='N',
        help=f'Number of galaxies (default: {GALAXY_COUNT})',
    )
    parser.add_argument(
        '--stars',
        '-n',
        type=int,
        default=MAX_STARS,
        metavar='N',
        help=f'Stars per galaxy (default: {MAX_STARS}). Galaxy mass is unaffected.',
    )
    parser.add_argument(
        '--seed',
        '-s',
        type=int,
        default=None,
        metavar='SEED',
        help='Random seed for reproducibility',
    )
    parser.add_argument(
        '--timestep',
        '-dt',
        type=float,
        default=DELTAT,
        metavar='DT',
        help=f'Integration timestep (default: {DELTAT}).',
    )
    parser.add_argument(
        '--lifetime',
        '-L',
        type=int,
        default=MAX_LIFETIME,
        metavar='STEPS',
        help=f'Steps before a new universe is generated (default: {MAX_LIFETIME}).',
    )
    parser.add_argument(
        '--min-distance',
        '-m',
        type=float,
        default=MIN_DISTANCE,
        metavar='DIST',
        help='Clamp distances in the force law to at least DIST. '
        'The reference behaviour is unsoftened (default: %(default)s).',
    )
    parser.add_argument(
        '--precision',
        '-p',
        type=int,
        choices=[64, 32],
        default=PRECISION,
        metavar='BITS',
        help=f'Floating point precision: 64 or 32 bits (default: {PRECISION}).',
    )
    parser.add_argument(
        '--headless',
        type=int,
        default=None,
        metavar='STEPS',
        help='Run STEPS steps without a window and print diagnostics.',
    )
    args = parser.parse_args()
    if args.stars < 0:
        parser.error('--stars must be non-negative')
    if args.headless is not None and args.headless < 0:
        parser.error('--headless must be non-negative')
    if args.min_distance < 0:
        parser.error('--min-distance must be non-negative')
    return args


def run_headless(universe, rng, num_steps, min_distance, max_lifetime):
    """Advance the simulation without graphics, reporting every 100 steps."""
    from galaxy_collision.physics.engine import advance
    from galaxy_collision.physics.integrator import (
        compute_center_of_mass,
        compute_total_momentum,
        count_nonfinite,
    )

    start = time.time()
    done = 0
    while done < num_steps:
        chunk = min(100, num_steps - done)
        universe = advance(
            universe,
            chunk,
            rng,
            coupling=COUPLING,
            min_distance=min_distance,
            max_lifetime=max_lifetime,
        )
        done += chunk

        momentum = np.asarray(
            compute_total_momentum(universe.galaxy_velocities, universe.galaxy_masses)
        )
        com = np.asarray(
            compute_center_of_mass(universe.galaxy_positions, universe.galaxy_masses)
        )
        lost = int(count_nonfinite(universe.star_positions, universe.star_velocities))
        print(
            f"Step {done}: universe step {universe.step_count}, "
            f"momentum ({momentum[0]:+.3f}, {momentum[1]:+.3f}, {momentum[2]:+.3f}), "
            f"CoM ({com[0]:+.3f}, {com[1]:+.3f}, {com[2]:+.3f}), non-finite stars: {lost}"
        )

    elapsed = max(time.time() - start, 1e-9)
    print(f"Ran {num_steps} steps in {elapsed:.2f} s ({num_steps / elapsed:.0f} steps/s)")


def main():
    """Main entry point."""
    print("Use --help for command-line options.")
    args = parse_args()

    # Precision must be configured before any JAX arrays exist
    from galaxy_collision.physics.engine import configure_precision
    from galaxy_collision.physics.gravity import get_device_info
    from galaxy_collision.initialization.generators import create_universe

    configure_precision(args.precision)
    print(f"Physics precision: {args.precision}-bit")
    print(get_device_info())

    rng = np.random.default_rng(args.seed)
    print(f"Initializing {args.galaxies} galaxies with {args.stars} stars each...")
    universe = create_universe(
        args.galaxies, rng=rng, num_stars=args.stars, deltat=args.timestep
    )
    print("Universe initialized.")

    if args.headless is not None:
        run_headless(universe, rng, args.headless, args.min_distance, args.lifetime)
        return

    # Import here to avoid loading graphics libraries for --help
    from galaxy_collision.visualization.renderer import run_visualization

    print("Press H in the visualization window to toggle on-screen help.")
    print("Starting visualization...")
    try:
        run_visualization(
            universe,
            rng,
            coupling=COUPLING,
            min_distance=args.min_distance,
            max_lifetime=args.lifetime,
        )
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    print("Done.")


if __name__ == '__main__':
    main()
