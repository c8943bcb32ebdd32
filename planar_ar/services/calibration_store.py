"""Accumulates checkerboard observations and fits camera intrinsics.

Typical session::

    store = CalibrationStore()
    overlay = store.capture_candidate(frame)   # every frame
    store.commit_last_valid()                  # on user request
    intrinsics = store.run_fit()               # once >= 5 samples
    store.persist("../calibration/intrinsics.yaml")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from ..ar_types import CalibrationSample, CameraIntrinsics
from ..config import CalibrationConfig, CheckerboardConfig
from ..errors import Underdetermined
from ..patterns import object_point_grid
from ..strategies.detect_checkerboard import CheckerboardDetect
from .calib import load_calib, save_calib


logger = logging.getLogger(__name__)

__all__ = ["CalibrationStore", "object_point_grid"]


class CalibrationStore:
    def __init__(
        self,
        board: CheckerboardConfig | None = None,
        config: CalibrationConfig | None = None,
        detector: CheckerboardDetect | None = None,
    ):
        self.board = board or CheckerboardConfig()
        self.cfg = config or CalibrationConfig()
        self.detector = detector or CheckerboardDetect(self.board, scale=self.cfg.capture_scale)

        self._samples: list[CalibrationSample] = []
        self._object_grid = object_point_grid(self.board.cols, self.board.rows).astype(np.float32)

        self.last_corners: Optional[np.ndarray] = None
        self.last_image: Optional[np.ndarray] = None

        self.intrinsics: Optional[CameraIntrinsics] = None
        self.rvecs: list[np.ndarray] = []
        self.tvecs: list[np.ndarray] = []

    @property
    def samples(self) -> tuple[CalibrationSample, ...]:
        return tuple(self._samples)

    @property
    def image_size(self) -> Optional[tuple[int, int]]:
        if not self._samples:
            return None
        return self._samples[0].image_size

    @property
    def calibrated(self) -> bool:
        return self.intrinsics is not None

    @property
    def has_pending(self) -> bool:
        return self.last_corners is not None

    def capture_candidate(self, frame: np.ndarray) -> np.ndarray:
        """Detect the board and remember it as the last valid detection.

        Returns an overlay copy of ``frame``; nothing is committed here.
        """
        overlay = frame.copy()
        corners = self.detector.detect(frame)
        if corners is not None:
            self.last_corners = corners
            self.last_image = frame.copy()
            self.detector.draw(overlay, corners)
        return overlay

    def commit_last_valid(self) -> bool:
        if self.last_corners is None or self.last_image is None:
            logger.warning("No valid detection available to save.")
            return False

        sample = CalibrationSample(
            image_points=self.last_corners.astype(np.float32).copy(),
            object_points=self._object_grid.copy(),
            image=self.last_image,
        )
        if self._samples and sample.image_size != self.image_size:
            logger.warning(
                "Frame size %s differs from calibration set size %s; sample not saved.",
                sample.image_size, self.image_size,
            )
            return False

        self._samples.append(sample)
        logger.info("Calibration frame saved. Total frames: %d", len(self._samples))
        return True

    def run_fit(self, image_size: tuple[int, int] | None = None) -> CameraIntrinsics:
        n = len(self._samples)
        if n < self.cfg.min_samples:
            raise Underdetermined(
                "Not enough calibration images", sample_count=n, required_count=self.cfg.min_samples
            )

        w, h = image_size or self.image_size
        K = np.eye(3, dtype=np.float64)
        K[0, 2] = w / 2.0
        K[1, 2] = h / 2.0
        dist = np.zeros((5, 1), dtype=np.float64)
        flags = cv2.CALIB_FIX_ASPECT_RATIO if self.cfg.fix_aspect_ratio else 0

        object_points = [s.object_points for s in self._samples]
        image_points = [s.image_points.reshape(-1, 1, 2) for s in self._samples]
        try:
            err, K, dist, rvecs, tvecs = cv2.calibrateCamera(
                object_points, image_points, (int(w), int(h)), K, dist, flags=flags
            )
        except cv2.error as exc:
            raise Underdetermined(
                f"Intrinsic fit failed: {exc}", sample_count=n, required_count=self.cfg.min_samples
            ) from exc

        if not np.isfinite(err) or K[0, 0] <= 0 or K[1, 1] <= 0:
            raise Underdetermined(
                "Intrinsic fit diverged", sample_count=n, required_count=self.cfg.min_samples
            )

        self.intrinsics = CameraIntrinsics(
            np.asarray(K, dtype=np.float64),
            np.asarray(dist, dtype=np.float64).reshape(-1, 1),
            float(err),
        )
        self.rvecs = [np.asarray(r).reshape(3, 1) for r in rvecs]
        self.tvecs = [np.asarray(t).reshape(3, 1) for t in tvecs]

        logger.info("Calibration complete.")
        logger.info("Camera Matrix:\n%s", self.intrinsics.K)
        logger.info("Distortion Coefficients: %s", self.intrinsics.dist.ravel())
        logger.info("Reprojection Error: %.4f pixels", self.intrinsics.reprojection_error)
        return self.intrinsics

    def persist(self, path: str | Path) -> None:
        if self.intrinsics is None:
            raise Underdetermined("Camera not calibrated yet", sample_count=len(self._samples),
                                  required_count=self.cfg.min_samples)
        save_calib(path, self.intrinsics)
        logger.info("Calibration parameters saved to %s", path)

    def load(self, path: str | Path) -> CameraIntrinsics:
        self.intrinsics = load_calib(path)
        return self.intrinsics
