import numpy as np

from ..ar_types import Model


def adjust_model(vertices: np.ndarray, scale: float, z_offset: float) -> np.ndarray:
    """Scale every coordinate, then lift Z by ``z_offset``. Mutates in place."""
    vertices *= scale
    vertices[:, 2] += z_offset
    return vertices


def pyramid_model() -> Model:
    """Square-based pyramid in the checkerboard frame (rows run towards -Y).

    The four side triangles already trace the base outline, so the base
    itself is not emitted as a face.
    """
    vertices = np.array(
        [
            [0.0, 0.0, 0.0],
            [2.0, 0.0, 0.0],
            [2.0, -2.0, 0.0],
            [0.0, -2.0, 0.0],
            [1.0, -1.0, 3.0],  # apex
        ],
        dtype=np.float64,
    )
    faces = np.array(
        [
            [0, 1, 4],
            [1, 2, 4],
            [2, 3, 4],
            [3, 0, 4],
        ],
        dtype=np.int32,
    )
    return Model(vertices, faces)
