"""Tests for the gravitational kick kernels."""

import jax.numpy as jnp
import numpy as np
import pytest

from galaxy_collision.config import COUPLING
from galaxy_collision.physics.gravity import (
    compute_pair_forces,
    compute_star_velocity_kicks,
    get_device_info,
)


def test_star_kick_points_at_galaxy():
    stars = jnp.array([[1.0, 0.0, 0.0], [0.0, -2.0, 0.0]])
    galaxies = jnp.array([[0.0, 0.0, 0.0]])
    masses = jnp.array([700.0])

    kicks = np.asarray(compute_star_velocity_kicks(stars, galaxies, masses))

    np.testing.assert_allclose(kicks[0], [-700.0 * COUPLING, 0.0, 0.0])
    np.testing.assert_allclose(kicks[1], [0.0, 700.0 * COUPLING / 4.0, 0.0])


def test_star_kick_sums_over_galaxies():
    stars = jnp.array([[0.0, 0.0, 0.0]])
    galaxies = jnp.array([[1.0, 0.0, 0.0], [-1.0, 0.0, 0.0], [0.0, 0.0, 2.0]])
    masses = jnp.array([700.0, 700.0, 800.0])

    kicks = np.asarray(compute_star_velocity_kicks(stars, galaxies, masses))

    # The two opposite galaxies cancel
    np.testing.assert_allclose(kicks[0], [0.0, 0.0, 800.0 / 4.0 * COUPLING], atol=1e-15)


def test_star_kick_distance_clamp():
    stars = jnp.array([[0.001, 0.0, 0.0]])
    galaxies = jnp.array([[0.0, 0.0, 0.0]])
    masses = jnp.array([700.0])

    raw = np.asarray(compute_star_velocity_kicks(stars, galaxies, masses))
    clamped = np.asarray(
        compute_star_velocity_kicks(stars, galaxies, masses, min_distance=0.1)
    )

    assert raw[0, 0] == pytest.approx(-700.0 * COUPLING / 0.001**2)
    assert clamped[0, 0] == pytest.approx(-0.001 * 700.0 * COUPLING / 0.1**3)


def test_star_kick_with_no_stars():
    kicks = compute_star_velocity_kicks(
        jnp.zeros((0, 3)), jnp.zeros((2, 3)), jnp.array([700.0, 700.0])
    )
    assert kicks.shape == (0, 3)


def test_pair_forces_between_two_galaxies():
    positions = jnp.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]])
    masses = jnp.array([700.0, 700.0])
    mask = jnp.array([False, True])

    forces = np.asarray(compute_pair_forces(0, positions, masses, mask))

    np.testing.assert_allclose(forces[0], 0.0)
    np.testing.assert_allclose(forces[1], [2.0 * 700.0 * 700.0 / 8.0 * COUPLING, 0.0, 0.0])


def test_pair_forces_respect_mask():
    positions = jnp.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    masses = jnp.array([700.0, 700.0, 700.0])
    mask = jnp.array([False, False, True])

    forces = np.asarray(compute_pair_forces(1, positions, masses, mask))

    np.testing.assert_allclose(forces[:2], 0.0)
    assert np.all(np.isfinite(forces))
    assert forces[2, 0] < 0.0
    assert forces[2, 1] > 0.0


def test_pair_forces_scale_with_both_masses():
    positions = jnp.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    mask = jnp.array([False, True])

    light = np.asarray(compute_pair_forces(0, positions, jnp.array([700.0, 350.0]), mask))
    heavy = np.asarray(compute_pair_forces(0, positions, jnp.array([700.0, 700.0]), mask))

    np.testing.assert_allclose(heavy, 2.0 * light)


def test_device_info():
    assert get_device_info().startswith("JAX devices:")
