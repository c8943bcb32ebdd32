"""Readouts derived from a solved target pose."""

import cv2
import numpy as np

from .ar_types import Pose


def camera_position(pose: Pose) -> np.ndarray:
    """Camera centre in the target frame: ``-R^T t`` for the pose's (R, t)."""
    R, _ = cv2.Rodrigues(np.asarray(pose.rvec, dtype=np.float64).reshape(3, 1))
    t = np.asarray(pose.tvec, dtype=np.float64).reshape(3)
    return -R.T @ t
