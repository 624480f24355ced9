"""Perspective projection of star positions to canvas pixels."""

import numpy as np
from typing import Tuple

from ..config import FOCAL_LENGTH, MAX_POINT_SIZE


def project_to_screen(
    positions: np.ndarray,
    sizes: np.ndarray,
    width: int,
    height: int,
    focal_length: float = FOCAL_LENGTH,
    max_point_size: int = MAX_POINT_SIZE,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Project 3D star positions onto the canvas with a pinhole camera at the origin.

    The camera looks down +z:

        x = floor(f * X / Z + width / 2)
        y = floor(f * Y / Z + height / 2)

    Nearer and larger stars get bigger squares:

        point = min(floor(2 / (Z + size)) + 1, max_point_size)

    Stars at or behind the camera (Z <= 0) are not drawn.

    Args:
        positions: Star positions (N, 3)
        sizes: Star size classes (N,)
        width: Canvas width in pixels
        height: Canvas height in pixels
        focal_length: Pixels per unit at depth 1
        max_point_size: Largest square in pixels

    Returns:
        Tuple of (pixels (M, 2), point_sizes (M,), visible (N,) mask)
    """
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    sizes = np.asarray(sizes).reshape(-1)

    # Non-finite stars (numerical blow-up) are dropped as well
    visible = (positions[:, 2] > 0.0) & np.all(np.isfinite(positions), axis=1)
    front = positions[visible]
    z = front[:, 2]

    x = np.floor(focal_length * front[:, 0] / z + width / 2)
    y = np.floor(focal_length * front[:, 1] / z + height / 2)
    point_sizes = np.minimum(np.floor(2.0 / (z + sizes[visible])) + 1, max_point_size)

    return np.column_stack([x, y]), point_sizes, visible
