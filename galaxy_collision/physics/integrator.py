"""Fixed-step Euler integrator for colliding galaxies using JAX."""

import jax.numpy as jnp
from jax import jit, lax
from functools import partial
from typing import Tuple

from .gravity import compute_pair_forces, compute_star_velocity_kicks
from ..config import DELTAT, COUPLING, MIN_DISTANCE


State = Tuple[jnp.ndarray, jnp.ndarray, jnp.ndarray, jnp.ndarray]


@partial(jit, static_argnames=['dt', 'coupling', 'min_distance'])
def euler_step(
    galaxy_positions: jnp.ndarray,
    galaxy_velocities: jnp.ndarray,
    galaxy_masses: jnp.ndarray,
    star_positions: jnp.ndarray,
    star_velocities: jnp.ndarray,
    dt: float = DELTAT,
    coupling: float = COUPLING,
    min_distance: float = MIN_DISTANCE,
) -> State:
    """
    Advance the universe by one tick.

    Galaxies are processed in order. For galaxy i:

    1. Kick every star of galaxy i with the pull of all galaxy centers
       (including its own), then drift it: p += v * dt.
    2. Exchange equal and opposite impulses with every later galaxy k > i.
    3. Drift galaxy i: P_i += V_i * dt.

    The sequence is order-sensitive: stars of galaxy i see galaxies 0..i-1
    at their already-moved positions, and galaxy i moves only after all its
    pair interactions with later galaxies. This is the reference behaviour
    and is kept deliberately instead of a simultaneous update.

    Args:
        galaxy_positions: Galaxy positions (G, 3)
        galaxy_velocities: Galaxy velocities (G, 3)
        galaxy_masses: Galaxy masses (G,)
        star_positions: Star positions (G, S, 3)
        star_velocities: Star velocities (G, S, 3)
        dt: Timestep
        coupling: Empirical coupling constant
        min_distance: Distance clamp (0 keeps the unsoftened law)

    Returns:
        Tuple of (galaxy_positions, galaxy_velocities,
        star_positions, star_velocities)
    """
    num_galaxies = galaxy_positions.shape[0]
    indices = jnp.arange(num_galaxies)

    def galaxy_fn(i, carry):
        g_pos, g_vel, s_pos, s_vel = carry

        # Stars of galaxy i: full velocity update before the position update
        kicks = compute_star_velocity_kicks(
            s_pos[i], g_pos, galaxy_masses, coupling, min_distance
        )
        new_star_vel = s_vel[i] + kicks
        s_vel = s_vel.at[i].set(new_star_vel)
        s_pos = s_pos.at[i].add(new_star_vel * dt)

        # Galaxy i affects the rest of the galaxies
        forces = compute_pair_forces(
            i, g_pos, galaxy_masses, indices > i, coupling, min_distance
        )
        g_vel = g_vel.at[i].add(jnp.sum(forces, axis=0) / galaxy_masses[i])
        g_vel = g_vel - forces / galaxy_masses[:, None]

        g_pos = g_pos.at[i].add(g_vel[i] * dt)
        return g_pos, g_vel, s_pos, s_vel

    initial_state = (galaxy_positions, galaxy_velocities, star_positions, star_velocities)
    return lax.fori_loop(0, num_galaxies, galaxy_fn, initial_state)


@partial(jit, static_argnames=['dt', 'coupling', 'min_distance'])
def integrate_multiple_steps(
    galaxy_positions: jnp.ndarray,
    galaxy_velocities: jnp.ndarray,
    galaxy_masses: jnp.ndarray,
    star_positions: jnp.ndarray,
    star_velocities: jnp.ndarray,
    num_steps: int,
    dt: float = DELTAT,
    coupling: float = COUPLING,
    min_distance: float = MIN_DISTANCE,
) -> State:
    """
    Perform multiple integration steps in a single compiled loop.

    `num_steps` is traced, so changing it does not trigger recompilation.

    Args:
        galaxy_positions: Galaxy positions (G, 3)
        galaxy_velocities: Galaxy velocities (G, 3)
        galaxy_masses: Galaxy masses (G,)
        star_positions: Star positions (G, S, 3)
        star_velocities: Star velocities (G, S, 3)
        num_steps: Number of integration steps to perform
        dt: Timestep
        coupling: Empirical coupling constant
        min_distance: Distance clamp

    Returns:
        Tuple of (galaxy_positions, galaxy_velocities,
        star_positions, star_velocities)
    """

    def step_fn(_, carry):
        return euler_step(*carry[:2], galaxy_masses, *carry[2:], dt, coupling, min_distance)

    initial_state = (galaxy_positions, galaxy_velocities, star_positions, star_velocities)
    return lax.fori_loop(0, num_steps, step_fn, initial_state)


@jit
def compute_total_momentum(
    galaxy_velocities: jnp.ndarray, galaxy_masses: jnp.ndarray
) -> jnp.ndarray:
    """Compute total galaxy momentum: sum(M_i * V_i). Stars are massless."""
    return jnp.sum(galaxy_masses[:, None] * galaxy_velocities, axis=0)


@jit
def compute_center_of_mass(
    galaxy_positions: jnp.ndarray, galaxy_masses: jnp.ndarray
) -> jnp.ndarray:
    """Compute center of mass position: sum(M_i * P_i) / sum(M_i)."""
    total_mass = jnp.sum(galaxy_masses)
    weighted_positions = jnp.sum(galaxy_masses[:, None] * galaxy_positions, axis=0)
    return weighted_positions / total_mass


@jit
def count_nonfinite(star_positions: jnp.ndarray, star_velocities: jnp.ndarray) -> jnp.ndarray:
    """
    Count stars whose position or velocity is no longer finite.

    Nonzero only after a near-zero separation blew up the unsoftened force
    law; such stars are invisible and stay lost until the next reset.
    """
    finite = jnp.all(jnp.isfinite(star_positions), axis=-1) & jnp.all(
        jnp.isfinite(star_velocities), axis=-1
    )
    return jnp.sum(~finite)
