"""JAX-accelerated gravitational kicks between galaxies and stars."""

import jax
import jax.numpy as jnp
from jax import jit
from functools import partial

from ..config import COUPLING, MIN_DISTANCE


def _inverse_cube(r_squared: jnp.ndarray, min_distance: float) -> jnp.ndarray:
    """1 / r^3 with r^2 clamped below by min_distance^2 (no-op for 0)."""
    r_squared = jnp.maximum(r_squared, min_distance**2)
    return 1.0 / (r_squared * jnp.sqrt(r_squared))


@partial(jit, static_argnames=['coupling', 'min_distance'])
def compute_star_velocity_kicks(
    star_positions: jnp.ndarray,
    galaxy_positions: jnp.ndarray,
    galaxy_masses: jnp.ndarray,
    coupling: float = COUPLING,
    min_distance: float = MIN_DISTANCE,
) -> jnp.ndarray:
    """
    Compute the velocity change of each star from all galaxy centers.

    dv = sum_k (P_k - p) * M_k / |P_k - p|^3 * coupling

    The coupling constant already includes the timestep, so the result is
    added to the velocity directly. Stars are massless: they feel the
    galaxies but do not pull on them.

    Args:
        star_positions: Star positions (S, 3)
        galaxy_positions: Galaxy center positions (G, 3)
        galaxy_masses: Galaxy masses (G,)
        coupling: Empirical coupling constant
        min_distance: Distance clamp (0 keeps the unsoftened law)

    Returns:
        Velocity changes (S, 3)
    """
    # diff[s, k] = P_k - p_s
    diff = galaxy_positions[None, :, :] - star_positions[:, None, :]  # (S, G, 3)
    r_squared = jnp.sum(diff**2, axis=2)  # (S, G)
    strength = galaxy_masses[None, :] * _inverse_cube(r_squared, min_distance) * coupling
    return jnp.sum(diff * strength[:, :, None], axis=1)


@partial(jit, static_argnames=['coupling', 'min_distance'])
def compute_pair_forces(
    index: int,
    galaxy_positions: jnp.ndarray,
    galaxy_masses: jnp.ndarray,
    mask: jnp.ndarray,
    coupling: float = COUPLING,
    min_distance: float = MIN_DISTANCE,
) -> jnp.ndarray:
    """
    Compute the force between galaxy `index` and every galaxy in `mask`.

    F_k = (P_k - P_i) * M_i * M_k / |P_k - P_i|^3 * coupling

    Galaxy i gains F_k / M_i and galaxy k loses F_k / M_k, so each pair
    exchanges equal and opposite momentum.

    Args:
        index: Index i of the acting galaxy
        galaxy_positions: Galaxy positions (G, 3)
        galaxy_masses: Galaxy masses (G,)
        mask: Boolean mask (G,) of partner galaxies; must exclude `index`
        coupling: Empirical coupling constant
        min_distance: Distance clamp (0 keeps the unsoftened law)

    Returns:
        Force vectors (G, 3), zero outside `mask`
    """
    diff = galaxy_positions - galaxy_positions[index]  # (G, 3)
    r_squared = jnp.sum(diff**2, axis=1)  # (G,)

    # Masked-out entries include the zero self-distance
    r_squared = jnp.where(mask, r_squared, 1.0)
    strength = (
        galaxy_masses[index]
        * galaxy_masses
        * _inverse_cube(r_squared, min_distance)
        * coupling
    )
    return jnp.where(mask[:, None], diff * strength[:, None], 0.0)


def get_device_info() -> str:
    """Get information about JAX devices being used."""
    devices = jax.devices()
    device_strs = [f"{d.platform}:{d.device_kind}" for d in devices]
    return f"JAX devices: {device_strs}"
