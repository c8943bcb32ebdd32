"""Planar-target camera calibration, pose estimation and wireframe AR."""

from .ar_types import CameraIntrinsics, Model, Pose, TrackState
from .detect_track import DetectTrackMachine
from .errors import ArError, ErrorKind
from .pose_engine import PoseEngine
from .services.calibration_store import CalibrationStore

__all__ = [
    "ArError",
    "CalibrationStore",
    "CameraIntrinsics",
    "DetectTrackMachine",
    "ErrorKind",
    "Model",
    "Pose",
    "PoseEngine",
    "TrackState",
]
