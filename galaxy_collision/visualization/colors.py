"""Per-galaxy star colors."""

import numpy as np
from typing import Sequence

from ..config import GALAXY_COLORS


def _hex_to_rgba(color: str) -> np.ndarray:
    """
    Convert a '#rrggbb' string to an opaque RGBA float array.

    Args:
        color: Hex color string

    Returns:
        Array (4,) with values in 0-1 range
    """
    color = color.lstrip('#')
    if len(color) != 6:
        raise ValueError(f"Expected a '#rrggbb' color, got {color!r}")
    r, g, b = (int(color[i : i + 2], 16) for i in (0, 2, 4))
    return np.array([r / 255.0, g / 255.0, b / 255.0, 1.0], dtype=np.float32)


def galaxy_colors(
    galaxy_count: int, palette: Sequence[str] = GALAXY_COLORS
) -> np.ndarray:
    """RGBA color for each galaxy (G, 4), cycling through the palette."""
    return np.array(
        [_hex_to_rgba(palette[i % len(palette)]) for i in range(galaxy_count)],
        dtype=np.float32,
    ).reshape(galaxy_count, 4)


def compute_star_colors(
    galaxy_count: int, stars_per_galaxy: int, palette: Sequence[str] = GALAXY_COLORS
) -> np.ndarray:
    """
    Color every star with the color of its galaxy.

    Args:
        galaxy_count: Number of galaxies
        stars_per_galaxy: Stars in each galaxy
        palette: Hex colors, reused cyclically when there are more galaxies

    Returns:
        RGBA colors (G * S, 4), ordered like the flattened star arrays
    """
    colors = galaxy_colors(galaxy_count, palette)
    return np.repeat(colors, stars_per_galaxy, axis=0)
