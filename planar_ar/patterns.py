"""Target-local 3D geometry of the supported planar patterns."""

import numpy as np


def object_point_grid(pattern_width: int, pattern_height: int) -> np.ndarray:
    """Checkerboard corner grid, row-major: the (i*W + j)-th point is (j, -i, 0).

    Y is negated so the board's first detected corner (top-left in the image)
    is the origin and rows run towards -Y.
    """
    pts = np.zeros((pattern_height * pattern_width, 3), dtype=np.float64)
    for i in range(pattern_height):
        for j in range(pattern_width):
            pts[i * pattern_width + j] = (j, -i, 0.0)
    return pts


def rectangle_object_points(width: float = 8.0, height: float = 6.0) -> np.ndarray:
    """Corners of the rectangular target in TL, TR, BR, BL order on z=0."""
    return np.array(
        [
            [0.0, 0.0, 0.0],
            [width, 0.0, 0.0],
            [width, height, 0.0],
            [0.0, height, 0.0],
        ],
        dtype=np.float64,
    )
