"""Value types holding the simulation state: stars, galaxies and the universe."""

import numpy as np
from typing import Iterator, List, NamedTuple


class Star(NamedTuple):
    """A massless point orbiting its galaxy."""

    position: np.ndarray  # (3,)
    velocity: np.ndarray  # (3,)
    size: int  # Rendering size class in [0, MAX_STAR_SIZE)


class Galaxy(NamedTuple):
    """A point-mass center plus a fixed population of orbiting stars."""

    mass: float
    size: float
    position: np.ndarray  # (3,)
    velocity: np.ndarray  # (3,)
    orientation: np.ndarray  # (3, 3) rotation, rows are the disk axes
    star_positions: np.ndarray  # (S, 3)
    star_velocities: np.ndarray  # (S, 3)
    star_sizes: np.ndarray  # (S,) int

    @property
    def num_stars(self) -> int:
        """Number of stars in the galaxy."""
        return len(self.star_sizes)

    @property
    def stars(self) -> List[Star]:
        """Per-star views of the star arrays, in order."""
        return list(self.iter_stars())

    def iter_stars(self) -> Iterator[Star]:
        for position, velocity, size in zip(
            self.star_positions, self.star_velocities, self.star_sizes
        ):
            yield Star(position, velocity, int(size))


class Universe(NamedTuple):
    """
    Complete simulation state.

    Galaxies are stored as stacked arrays (galaxy index first) so the
    physics kernels can process the whole universe in one call. Use
    galaxy() or galaxies for per-galaxy views.
    """

    galaxy_masses: np.ndarray  # (G,)
    galaxy_sizes: np.ndarray  # (G,)
    galaxy_positions: np.ndarray  # (G, 3)
    galaxy_velocities: np.ndarray  # (G, 3)
    orientations: np.ndarray  # (G, 3, 3)
    star_positions: np.ndarray  # (G, S, 3)
    star_velocities: np.ndarray  # (G, S, 3)
    star_sizes: np.ndarray  # (G, S) int
    step_count: int
    deltat: float
    hit_iterations: int

    @property
    def galaxy_count(self) -> int:
        """Number of galaxies."""
        return len(self.galaxy_masses)

    @property
    def stars_per_galaxy(self) -> int:
        """Number of stars in each galaxy."""
        return self.star_sizes.shape[1]

    def galaxy(self, index: int) -> Galaxy:
        """Return a view of galaxy `index`."""
        return Galaxy(
            mass=float(self.galaxy_masses[index]),
            size=float(self.galaxy_sizes[index]),
            position=self.galaxy_positions[index],
            velocity=self.galaxy_velocities[index],
            orientation=self.orientations[index],
            star_positions=self.star_positions[index],
            star_velocities=self.star_velocities[index],
            star_sizes=self.star_sizes[index],
        )

    @property
    def galaxies(self) -> List[Galaxy]:
        """Views of all galaxies, in order."""
        return [self.galaxy(i) for i in range(self.galaxy_count)]


def stack_galaxies(
    galaxies: List[Galaxy], deltat: float, hit_iterations: int, step_count: int = 0
) -> Universe:
    """
    Build a Universe from individually generated galaxies.

    Args:
        galaxies: Galaxies in simulation order (all with the same star count)
        deltat: Integration timestep the galaxies were generated for
        hit_iterations: Back-extrapolation steps the galaxies were generated for
        step_count: Initial value of the lifetime counter

    Returns:
        Universe holding copies of the galaxy arrays
    """
    return Universe(
        galaxy_masses=np.array([g.mass for g in galaxies], dtype=np.float64),
        galaxy_sizes=np.array([g.size for g in galaxies], dtype=np.float64),
        galaxy_positions=np.stack([g.position for g in galaxies]),
        galaxy_velocities=np.stack([g.velocity for g in galaxies]),
        orientations=np.stack([g.orientation for g in galaxies]),
        star_positions=np.stack([g.star_positions for g in galaxies]),
        star_velocities=np.stack([g.star_velocities for g in galaxies]),
        star_sizes=np.stack([g.star_sizes for g in galaxies]),
        step_count=step_count,
        deltat=deltat,
        hit_iterations=hit_iterations,
    )
