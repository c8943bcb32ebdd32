import cv2
import numpy as np

from ..config import CheckerboardConfig
from .preprocess import downscale, to_gray


class CheckerboardDetect:
    """
    Strategy: find the internal corners of a checkerboard.

    Detection may run on a downscaled copy for throughput; refined corners are
    always returned in full-resolution pixel coordinates as a (W*H, 2) array,
    or None when the board is not fully visible.
    """
    def __init__(self, config: CheckerboardConfig | None = None, scale: float = 1.0):
        self.cfg = config or CheckerboardConfig()
        self.scale = scale
        self.flags = cv2.CALIB_CB_ADAPTIVE_THRESH | cv2.CALIB_CB_NORMALIZE_IMAGE
        if self.cfg.fast_check:
            self.flags |= cv2.CALIB_CB_FAST_CHECK
        self.criteria = (
            cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_COUNT,
            self.cfg.subpix_max_iter,
            self.cfg.subpix_eps,
        )

    @property
    def pattern_size(self) -> tuple[int, int]:
        return self.cfg.pattern_size

    def detect(self, image: np.ndarray) -> np.ndarray | None:
        gray = to_gray(downscale(image, self.scale))
        found, corners = cv2.findChessboardCorners(gray, self.pattern_size, None, self.flags)
        expected = self.cfg.cols * self.cfg.rows
        if not found or corners is None or len(corners) != expected:
            return None

        win = (self.cfg.subpix_window, self.cfg.subpix_window)
        corners = cv2.cornerSubPix(gray, corners, win, (-1, -1), self.criteria)
        pts = corners.reshape(-1, 2).astype(np.float32)
        if self.scale != 1.0:
            pts /= self.scale
        return pts

    def draw(self, image: np.ndarray, corners: np.ndarray) -> np.ndarray:
        cv2.drawChessboardCorners(
            image, self.pattern_size, corners.reshape(-1, 1, 2).astype(np.float32), True
        )
        return image
