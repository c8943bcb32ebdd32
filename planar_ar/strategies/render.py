import logging

import cv2
import numpy as np

from ..ar_types import CameraIntrinsics, Model, Pose


logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)
GREEN = (0, 255, 0)
RED = (0, 0, 255)

# cv2.line takes int coordinates; far-off projections are clamped before rounding
_PIXEL_LIMIT = 1 << 20


class WireframeRenderer:
    """Unfilled triangle-edge rendering of a model under a solved pose."""

    def __init__(self, color=WHITE, thickness: int = 2):
        self.color = color
        self.thickness = thickness
        self._reported_faces: set[int] = set()

    def project(self, vertices: np.ndarray, pose: Pose, intrinsics: CameraIntrinsics) -> np.ndarray:
        pts, _jac = cv2.projectPoints(
            np.asarray(vertices, dtype=np.float64).reshape(-1, 3),
            pose.rvec,
            pose.tvec,
            intrinsics.K,
            intrinsics.dist,
        )
        return pts.reshape(-1, 2)

    def render_model(self, image: np.ndarray, model: Model, pose: Pose, intrinsics: CameraIntrinsics) -> int:
        """Draw every valid face as three segments. Returns the number of faces drawn."""
        projected = self.project(model.vertices, pose, intrinsics)
        n = len(projected)
        finite = np.all(np.isfinite(projected), axis=1)
        pixels = np.rint(np.clip(projected, -_PIXEL_LIMIT, _PIXEL_LIMIT)).astype(np.int64)

        drawn = 0
        for i, face in enumerate(model.faces):
            a, b, c = (int(v) for v in face)
            if min(a, b, c) < 0 or max(a, b, c) >= n:
                if i not in self._reported_faces:
                    self._reported_faces.add(i)
                    logger.warning("Face %d has invalid indices: %d, %d, %d", i, a, b, c)
                continue
            if not (finite[a] and finite[b] and finite[c]):
                continue
            pa, pb, pc = (tuple(int(x) for x in pixels[k]) for k in (a, b, c))
            cv2.line(image, pa, pb, self.color, self.thickness)
            cv2.line(image, pb, pc, self.color, self.thickness)
            cv2.line(image, pc, pa, self.color, self.thickness)
            drawn += 1
        return drawn

    def render_axes(self, image: np.ndarray, pose: Pose, intrinsics: CameraIntrinsics, length: float = 3.0) -> np.ndarray:
        cv2.drawFrameAxes(image, intrinsics.K, intrinsics.dist, pose.rvec, pose.tvec, length)
        return image


def draw_outline(image: np.ndarray, corners: np.ndarray) -> np.ndarray:
    pts = np.rint(np.asarray(corners, dtype=np.float64).reshape(-1, 2)).astype(np.int64)
    for i in range(len(pts)):
        p = tuple(int(v) for v in pts[i])
        q = tuple(int(v) for v in pts[(i + 1) % len(pts)])
        cv2.line(image, p, q, GREEN, 2)
        cv2.circle(image, p, 5, RED, -1)
    return image


def put_hint(image: np.ndarray, text: str, origin=(50, 50), color=RED, scale: float = 1.0) -> np.ndarray:
    cv2.putText(image, text, origin, cv2.FONT_HERSHEY_SIMPLEX, scale, color, 2, cv2.LINE_AA)
    return image
