from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import numpy as np


@dataclass
class Frame:
    idx: int
    ts_iso: str
    image: Any  # numpy array (BGR or gray)


@dataclass
class Model:
    vertices: np.ndarray  # (N,3) float64
    faces: np.ndarray     # (M,3) int, 0-based

    @property
    def vertex_count(self) -> int:
        return int(len(self.vertices))

    @property
    def face_count(self) -> int:
        return int(len(self.faces))


@dataclass
class Pose:
    rvec: Any  # (3,1) Rodrigues
    tvec: Any  # (3,1)


@dataclass
class CameraIntrinsics:
    K: np.ndarray      # (3,3)
    dist: np.ndarray   # (5,1)
    reprojection_error: Optional[float] = None

    @property
    def fx(self) -> float:
        return float(self.K[0, 0])

    @property
    def fy(self) -> float:
        return float(self.K[1, 1])

    @property
    def principal_point(self) -> tuple[float, float]:
        return float(self.K[0, 2]), float(self.K[1, 2])


@dataclass
class Correspondences:
    image_points: np.ndarray   # (N,2)
    object_points: np.ndarray  # (N,3)

    def __len__(self) -> int:
        return int(len(self.image_points))


@dataclass
class CalibrationSample:
    image_points: np.ndarray   # (N,2) float32, full resolution
    object_points: np.ndarray  # (N,3) float32
    image: Any                 # reference full-resolution frame

    @property
    def image_size(self) -> tuple[int, int]:
        h, w = self.image.shape[:2]
        return w, h


class TrackState(Enum):
    DETECTING = "detecting"
    TRACKING = "tracking"


@dataclass
class StepResult:
    state: TrackState
    corners: Optional[np.ndarray]  # (4,2) ordered TL,TR,BR,BL while tracking
    event: str
    hint: Optional[str] = None
    good_count: Optional[int] = None
