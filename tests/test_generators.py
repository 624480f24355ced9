"""Tests for star, galaxy and universe initial conditions."""

import numpy as np
import pytest

from galaxy_collision.config import (
    HIT_ITERATIONS,
    DELTAT,
    MAX_STARS,
    MAX_STAR_SIZE,
    MIN_SIZE,
    ORBIT_SCALE,
    RANGE_SIZE,
    Z_OFFSET,
)
from galaxy_collision.initialization.generators import (
    create_galaxy,
    create_star,
    create_universe,
    generate_disk_stars,
    generate_orientation,
)
from galaxy_collision.state.universe import Star


def test_galaxy_has_exactly_max_stars(rng):
    galaxy = create_galaxy(rng)

    assert galaxy.num_stars == MAX_STARS
    assert galaxy.star_positions.shape == (MAX_STARS, 3)
    assert galaxy.star_velocities.shape == (MAX_STARS, 3)
    assert len(galaxy.stars) == MAX_STARS


def test_galaxy_mass_and_size(rng):
    for _ in range(20):
        galaxy = create_galaxy(rng, num_stars=10)
        assert galaxy.mass == MAX_STARS
        assert MIN_SIZE <= galaxy.size < MIN_SIZE + RANGE_SIZE


def test_galaxy_mass_independent_of_star_population(rng):
    galaxy = create_galaxy(rng, num_stars=0)

    assert galaxy.mass == MAX_STARS
    assert galaxy.num_stars == 0
    assert galaxy.stars == []


def test_star_sizes_are_integers_in_range(rng):
    galaxy = create_galaxy(rng)

    assert np.issubdtype(galaxy.star_sizes.dtype, np.integer)
    assert galaxy.star_sizes.min() >= 0
    assert galaxy.star_sizes.max() < MAX_STAR_SIZE
    for star in galaxy.stars[:20]:
        assert isinstance(star.size, int)


def test_galaxy_starts_back_extrapolated(rng):
    galaxy = create_galaxy(rng, num_stars=0)

    assert np.all(np.abs(galaxy.velocity) <= 1.0)
    # Undo the extrapolation: what is left is the jitter in [-0.5, 0.5)
    start = galaxy.position + galaxy.velocity * DELTAT * HIT_ITERATIONS
    start[2] -= Z_OFFSET
    assert np.all(start >= -0.5 - 1e-12)
    assert np.all(start < 0.5 + 1e-12)


def test_orientation_is_a_rotation(rng):
    for _ in range(10):
        mat = generate_orientation(rng)
        np.testing.assert_allclose(mat @ mat.T, np.eye(3), atol=1e-12)
        assert np.linalg.det(mat) == pytest.approx(1.0)
        # Only two angles: the middle row has no x component
        assert mat[1, 0] == 0.0


def test_stars_lie_in_a_thin_disk(rng):
    galaxy = create_galaxy(rng)
    offsets = galaxy.star_positions - galaxy.position

    # Back to the disk frame: orientation rows are orthonormal
    local = offsets @ galaxy.orientation.T
    radius = np.hypot(local[:, 0], local[:, 1])
    height = np.abs(local[:, 2])

    assert radius.max() <= galaxy.size
    assert np.all(height <= galaxy.size / 5 * np.exp(-2 * radius / galaxy.size) + 1e-12)


def test_star_velocities_are_circular_orbits(rng):
    galaxy = create_galaxy(rng)
    offsets = galaxy.star_positions - galaxy.position
    relative = galaxy.star_velocities - galaxy.velocity

    local_pos = offsets @ galaxy.orientation.T
    local_vel = relative @ galaxy.orientation.T

    # In the disk plane, perpendicular to the in-plane radius
    np.testing.assert_allclose(local_vel[:, 2], 0.0, atol=1e-12)
    np.testing.assert_allclose(
        np.sum(local_pos[:, :2] * local_vel[:, :2], axis=1), 0.0, atol=1e-9
    )

    r = np.linalg.norm(offsets, axis=1)
    speed = np.linalg.norm(relative, axis=1)
    np.testing.assert_allclose(speed, np.sqrt(galaxy.mass * ORBIT_SCALE / r), rtol=1e-9)


class ZeroRandom:
    """Random source that always draws 0, the worst case for the orbit law."""

    def random(self, size=None):
        return 0.0 if size is None else np.zeros(size)

    def integers(self, low, high, size=None):
        return np.full(size, low, dtype=np.int64)


def test_star_at_center_stays_finite(rng):
    galaxy = create_galaxy(rng, num_stars=0)

    positions, velocities, sizes = generate_disk_stars(galaxy, 5, rng=ZeroRandom())

    assert np.all(np.isfinite(velocities))
    np.testing.assert_allclose(positions, np.tile(galaxy.position, (5, 1)))
    np.testing.assert_array_equal(sizes, 0)


def test_create_star(rng):
    galaxy = create_galaxy(rng, num_stars=0)
    star = create_star(galaxy, rng)

    assert isinstance(star, Star)
    assert star.position.shape == (3,)
    assert star.velocity.shape == (3,)
    assert 0 <= star.size < MAX_STAR_SIZE
    assert np.linalg.norm(star.position - galaxy.position) <= galaxy.size * 1.2


def test_universe_shapes(rng):
    universe = create_universe(4, rng=rng, num_stars=25)

    assert universe.galaxy_count == 4
    assert universe.stars_per_galaxy == 25
    assert universe.step_count == 0
    assert universe.star_positions.shape == (4, 25, 3)
    assert [g.num_stars for g in universe.galaxies] == [25] * 4
    np.testing.assert_array_equal(universe.galaxy_masses, MAX_STARS)


def test_universe_galaxy_view(small_universe):
    galaxy = small_universe.galaxy(1)

    np.testing.assert_array_equal(galaxy.position, small_universe.galaxy_positions[1])
    np.testing.assert_array_equal(galaxy.star_positions, small_universe.star_positions[1])
    assert galaxy.mass == small_universe.galaxy_masses[1]


def test_universe_accepts_large_galaxy_count(rng):
    universe = create_universe(20, rng=rng, num_stars=2)
    assert universe.galaxy_count == 20


@pytest.mark.parametrize('galaxy_count', [0, -3, 2.5, '3', True, None])
def test_universe_rejects_invalid_galaxy_count(rng, galaxy_count):
    with pytest.raises(ValueError):
        create_universe(galaxy_count, rng=rng)


def test_universe_rejects_negative_star_count(rng):
    with pytest.raises(ValueError):
        create_universe(3, rng=rng, num_stars=-1)


def test_same_seed_same_initial_conditions():
    a = create_universe(3, rng=np.random.default_rng(99), num_stars=40)
    b = create_universe(3, rng=np.random.default_rng(99), num_stars=40)

    for field in a._fields:
        np.testing.assert_array_equal(getattr(a, field), getattr(b, field))


def test_different_seeds_differ():
    a = create_universe(3, rng=np.random.default_rng(1), num_stars=40)
    b = create_universe(3, rng=np.random.default_rng(2), num_stars=40)

    assert not np.allclose(a.star_positions, b.star_positions)
