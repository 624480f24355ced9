"""Simulation stepping and universe lifecycle."""

import numpy as np
from typing import Optional

import jax
import jax.numpy as jnp

from ..config import COUPLING, MIN_DISTANCE, MAX_LIFETIME, PRECISION
from ..initialization.generators import create_universe
from ..state.universe import Universe
from .integrator import euler_step, integrate_multiple_steps

# Precision dtype mapping
PRECISION_DTYPES = {
    64: jnp.float64,
    32: jnp.float32,
}


def configure_precision(precision: int = PRECISION):
    """
    Select 64 or 32 bit floats for the physics kernels.

    Must be called before any JAX arrays are created.
    """
    if precision not in PRECISION_DTYPES:
        raise ValueError(f"precision must be 64 or 32, got {precision!r}")
    jax.config.update("jax_enable_x64", precision == 64)
    return PRECISION_DTYPES[precision]


def regenerate(universe: Universe, rng: Optional[np.random.Generator] = None) -> Universe:
    """Replace `universe` with a fresh one of the same shape and timing."""
    return create_universe(
        universe.galaxy_count,
        rng=rng,
        num_stars=universe.stars_per_galaxy,
        deltat=universe.deltat,
        hit_iterations=universe.hit_iterations,
    )


def _with_state(universe: Universe, state, step_count: int) -> Universe:
    g_pos, g_vel, s_pos, s_vel = state
    return universe._replace(
        galaxy_positions=np.asarray(g_pos),
        galaxy_velocities=np.asarray(g_vel),
        star_positions=np.asarray(s_pos),
        star_velocities=np.asarray(s_vel),
        step_count=step_count,
    )


def step(
    universe: Universe,
    rng: Optional[np.random.Generator] = None,
    coupling: float = COUPLING,
    min_distance: float = MIN_DISTANCE,
    max_lifetime: int = MAX_LIFETIME,
) -> Universe:
    """
    Advance the simulation by one frame.

    The input is left untouched; a new Universe is returned. Once the step
    counter would exceed `max_lifetime` the whole universe is discarded and a
    fresh one with the same galaxy count is returned instead, with its
    counter at 0.

    Args:
        universe: Current simulation state
        rng: Random source used only when the universe is regenerated
        coupling: Empirical coupling constant
        min_distance: Distance clamp (0 keeps the unsoftened law)
        max_lifetime: Number of steps before regeneration

    Returns:
        The next simulation state
    """
    step_count = universe.step_count + 1
    if step_count > max_lifetime:
        return regenerate(universe, rng)

    state = euler_step(
        jnp.asarray(universe.galaxy_positions),
        jnp.asarray(universe.galaxy_velocities),
        jnp.asarray(universe.galaxy_masses),
        jnp.asarray(universe.star_positions),
        jnp.asarray(universe.star_velocities),
        dt=universe.deltat,
        coupling=coupling,
        min_distance=min_distance,
    )
    return _with_state(universe, state, step_count)


def advance(
    universe: Universe,
    num_steps: int,
    rng: Optional[np.random.Generator] = None,
    coupling: float = COUPLING,
    min_distance: float = MIN_DISTANCE,
    max_lifetime: int = MAX_LIFETIME,
) -> Universe:
    """
    Apply `num_steps` frames, equivalent to calling step() repeatedly.

    Runs of frames between regenerations are fused into one compiled loop.

    Args:
        universe: Current simulation state
        num_steps: Number of frames to advance
        rng: Random source used when the universe is regenerated
        coupling: Empirical coupling constant
        min_distance: Distance clamp
        max_lifetime: Number of steps before regeneration

    Returns:
        The simulation state after `num_steps` frames
    """
    if num_steps < 0:
        raise ValueError(f"num_steps must be non-negative, got {num_steps!r}")

    remaining = num_steps
    while remaining > 0:
        run = min(remaining, max_lifetime - universe.step_count)
        if run <= 0:
            universe = regenerate(universe, rng)
            remaining -= 1
            continue

        state = integrate_multiple_steps(
            jnp.asarray(universe.galaxy_positions),
            jnp.asarray(universe.galaxy_velocities),
            jnp.asarray(universe.galaxy_masses),
            jnp.asarray(universe.star_positions),
            jnp.asarray(universe.star_velocities),
            run,
            dt=universe.deltat,
            coupling=coupling,
            min_distance=min_distance,
        )
        universe = _with_state(universe, state, universe.step_count + run)
        remaining -= run

    return universe
