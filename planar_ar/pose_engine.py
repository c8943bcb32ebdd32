from __future__ import annotations

import logging

import numpy as np

from .ar_types import CameraIntrinsics, Correspondences, Model, Pose
from .config import CheckerboardConfig, RectangleConfig
from .patterns import object_point_grid, rectangle_object_points
from .strategies.detect_checkerboard import CheckerboardDetect
from .strategies.localize_pnp import PnPLocalize
from .strategies.render import WireframeRenderer


logger = logging.getLogger(__name__)


class PoseEngine:
    """
    Per-frame pose of a planar target and the wireframe overlay anchored to it.

    Pattern detection yields ordered image points paired with the pattern's
    object points; ``overlay`` solves PnP on them and draws axes plus model.
    """

    def __init__(
        self,
        intrinsics: CameraIntrinsics,
        board: CheckerboardConfig | None = None,
        target: RectangleConfig | None = None,
        checkerboard: CheckerboardDetect | None = None,
        localizer: PnPLocalize | None = None,
        renderer: WireframeRenderer | None = None,
        axis_length: float = 3.0,
    ):
        self.intrinsics = intrinsics
        self.board = board or CheckerboardConfig()
        self.target = target or RectangleConfig()
        self.checkerboard = checkerboard or CheckerboardDetect(self.board)
        self.localizer = localizer or PnPLocalize(intrinsics)
        self.renderer = renderer or WireframeRenderer()
        self.axis_length = axis_length

        self.board_points = object_point_grid(self.board.cols, self.board.rows)
        self.target_points = rectangle_object_points(self.target.width, self.target.height)

    def detect_checkerboard(self, image: np.ndarray) -> Correspondences | None:
        corners = self.checkerboard.detect(image)
        if corners is None:
            return None
        return Correspondences(corners.astype(np.float64), self.board_points)

    def rectangle_correspondences(self, corners: np.ndarray) -> Correspondences:
        return Correspondences(np.asarray(corners, dtype=np.float64).reshape(4, 2), self.target_points)

    def solve_pose(self, object_points, image_points) -> Pose:
        return self.localizer.estimate(object_points, image_points)

    def render_model(self, image: np.ndarray, model: Model, pose: Pose) -> int:
        return self.renderer.render_model(image, model, pose, self.intrinsics)

    def render_axes(self, image: np.ndarray, pose: Pose, length: float | None = None) -> np.ndarray:
        return self.renderer.render_axes(
            image, pose, self.intrinsics, self.axis_length if length is None else length
        )

    def overlay(self, image: np.ndarray, model: Model, corr: Correspondences) -> Pose:
        """Solve the pose for ``corr`` and draw axes and model onto ``image``.

        Raises PoseFailure without touching the image when PnP fails.
        """
        pose = self.solve_pose(corr.object_points, corr.image_points)
        self.render_axes(image, pose)
        drawn = self.render_model(image, model, pose)
        logger.debug("overlay: %d/%d faces drawn", drawn, model.face_count)
        return pose
