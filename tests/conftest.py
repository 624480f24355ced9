"""Shared fixtures for the galaxy collision tests."""

import jax
import numpy as np
import pytest

# Compare trajectories in double precision
jax.config.update("jax_enable_x64", True)


@pytest.fixture
def rng():
    """Seeded random number generator."""
    return np.random.default_rng(1234)


@pytest.fixture
def small_universe(rng):
    """Three galaxies with a reduced star population."""
    from galaxy_collision.initialization.generators import create_universe

    return create_universe(3, rng=rng, num_stars=50)
