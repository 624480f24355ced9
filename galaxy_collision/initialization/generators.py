"""Initial conditions for stars, galaxies and the universe."""

import numbers

import numpy as np
from typing import Tuple, Optional

from ..config import (
    MAX_STARS,
    MIN_SIZE,
    RANGE_SIZE,
    Z_OFFSET,
    MAX_STAR_SIZE,
    ORBIT_SCALE,
    MIN_ORBIT_RADIUS,
    DELTAT,
    HIT_ITERATIONS,
)
from ..state.universe import Galaxy, Star, Universe, stack_galaxies


def generate_disk_stars(
    galaxy: Galaxy,
    num_stars: int = MAX_STARS,
    rng: Optional[np.random.Generator] = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Sample stars in a flattened disk around a galaxy, on circular orbits.

    In the disk frame a star sits at angle w and radius d, at height h:

        w ~ U[0, 2*pi),  d ~ U[0, 1) * size
        h = U[0, 1) * exp(-2 * d / size) / 5 * size,  sign flipped half the time

    so the disk is thicker near the center. The orbital speed follows a point
    mass at the galaxy center:

        v = sqrt(mass * ORBIT_SCALE / sqrt(d^2 + h^2))

    and points along the tangent (-sin w, cos w). Disk coordinates are mapped
    to world space through the rows of the galaxy orientation matrix.

    Args:
        galaxy: Parent galaxy (its star arrays are ignored)
        num_stars: Number of stars to generate
        rng: Random number generator (created if None)

    Returns:
        Tuple of (positions (N, 3), velocities (N, 3), sizes (N,))
    """
    if rng is None:
        rng = np.random.default_rng()

    w = 2.0 * np.pi * rng.random(num_stars)
    d = rng.random(num_stars) * galaxy.size
    h = rng.random(num_stars) * np.exp(-2.0 * (d / galaxy.size)) / 5.0 * galaxy.size
    h = np.where(rng.random(num_stars) < 0.5, -h, h)

    # A star drawn exactly at the center has no defined orbit
    r = np.maximum(np.sqrt(d * d + h * h), MIN_ORBIT_RADIUS)
    v = np.sqrt(galaxy.mass * ORBIT_SCALE / r)

    sin_w = np.sin(w)
    cos_w = np.cos(w)

    # Row vectors in the disk frame, rotated by the orientation rows
    disk_offsets = np.column_stack([d * cos_w, d * sin_w, h])
    disk_velocities = np.column_stack([-v * sin_w, v * cos_w, np.zeros(num_stars)])

    positions = disk_offsets @ galaxy.orientation + galaxy.position
    velocities = disk_velocities @ galaxy.orientation + galaxy.velocity
    sizes = rng.integers(0, MAX_STAR_SIZE, num_stars)

    return positions, velocities, sizes


def create_star(galaxy: Galaxy, rng: Optional[np.random.Generator] = None) -> Star:
    """Sample a single star for `galaxy` (see generate_disk_stars)."""
    positions, velocities, sizes = generate_disk_stars(galaxy, 1, rng=rng)
    return Star(position=positions[0], velocity=velocities[0], size=int(sizes[0]))


def generate_orientation(rng: np.random.Generator) -> np.ndarray:
    """
    Build a random disk orientation from two angles.

    Only two degrees of freedom are used: w1 tilts the disk about the x axis,
    w2 turns it about the y axis. Rows 0 and 1 span the disk plane, row 2 is
    its normal.

    Args:
        rng: Random number generator

    Returns:
        Rotation matrix (3, 3)
    """
    w1 = 2.0 * np.pi * rng.random()
    w2 = 2.0 * np.pi * rng.random()
    sin_w1, cos_w1 = np.sin(w1), np.cos(w1)
    sin_w2, cos_w2 = np.sin(w2), np.cos(w2)

    return np.array(
        [
            [cos_w2, -sin_w1 * sin_w2, cos_w1 * sin_w2],
            [0.0, cos_w1, sin_w1],
            [-sin_w2, -sin_w1 * cos_w2, cos_w1 * cos_w2],
        ]
    )


def create_galaxy(
    rng: Optional[np.random.Generator] = None,
    deltat: float = DELTAT,
    hit_iterations: int = HIT_ITERATIONS,
    num_stars: int = MAX_STARS,
) -> Galaxy:
    """
    Create a galaxy already heading into the collision zone.

    The galaxy gets a random bulk velocity and is placed where it would have
    been `hit_iterations` steps ago had it started near the origin, so all
    galaxies converge on the origin early in the simulation. Z_OFFSET keeps
    everything in front of the camera.

    The mass is always MAX_STARS, independent of `num_stars`.

    Args:
        rng: Random number generator (created if None)
        deltat: Integration timestep of the universe
        hit_iterations: Number of steps to extrapolate backwards
        num_stars: Number of stars to populate the galaxy with

    Returns:
        Fully populated Galaxy
    """
    if rng is None:
        rng = np.random.default_rng()

    mass = float(MAX_STARS)
    size = RANGE_SIZE * rng.random() + MIN_SIZE

    velocity = rng.random(3) * 2.0 - 1.0
    position = -velocity * deltat * hit_iterations + rng.random(3) - 0.5
    position[2] += Z_OFFSET

    orientation = generate_orientation(rng)

    galaxy = Galaxy(
        mass=mass,
        size=size,
        position=position,
        velocity=velocity,
        orientation=orientation,
        star_positions=np.empty((0, 3)),
        star_velocities=np.empty((0, 3)),
        star_sizes=np.empty(0, dtype=np.int64),
    )

    star_positions, star_velocities, star_sizes = generate_disk_stars(
        galaxy, num_stars, rng=rng
    )
    return galaxy._replace(
        star_positions=star_positions,
        star_velocities=star_velocities,
        star_sizes=star_sizes,
    )


def create_universe(
    galaxy_count: int,
    rng: Optional[np.random.Generator] = None,
    num_stars: int = MAX_STARS,
    deltat: float = DELTAT,
    hit_iterations: int = HIT_ITERATIONS,
) -> Universe:
    """
    Create a fresh universe of colliding galaxies.

    Args:
        galaxy_count: Number of galaxies (any positive integer)
        rng: Random number generator (created if None)
        num_stars: Stars per galaxy
        deltat: Integration timestep
        hit_iterations: Steps the galaxies are back-extrapolated

    Returns:
        Universe with step_count 0

    Raises:
        ValueError: If galaxy_count is not a positive integer or num_stars
            is negative
    """
    if (
        isinstance(galaxy_count, bool)
        or not isinstance(galaxy_count, numbers.Integral)
        or galaxy_count < 1
    ):
        raise ValueError(f"galaxy_count must be a positive integer, got {galaxy_count!r}")
    if num_stars < 0:
        raise ValueError(f"num_stars must be non-negative, got {num_stars!r}")

    if rng is None:
        rng = np.random.default_rng()

    galaxies = [
        create_galaxy(rng, deltat=deltat, hit_iterations=hit_iterations, num_stars=num_stars)
        for _ in range(int(galaxy_count))
    ]
    return stack_galaxies(galaxies, deltat=deltat, hit_iterations=hit_iterations)
