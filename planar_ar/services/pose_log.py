"""Per-frame pose log for replaying or plotting a session offline."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Optional

import numpy as np

from ..ar_types import Pose
from ..errors import IoFailure
from ..transforms import camera_position


class PoseLogWriter:
    """
    One CSV row per solved pose.

    ``target`` names the pattern (``checkerboard`` or ``rectangle``),
    ``event`` the detect/track step that produced the corners and
    ``good_count`` the flow corners that survived (empty right after a
    detection). Camera columns hold the camera centre in the target frame.
    """

    HEADER = [
        "recorded_at", "frame_idx", "target", "event", "good_count",
        "rvec_x", "rvec_y", "rvec_z",
        "tvec_x", "tvec_y", "tvec_z",
        "camera_x", "camera_y", "camera_z",
    ]

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._fh = None
        self._writer = None

    def open(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self.path.open("w", newline="")
        except OSError as exc:
            raise IoFailure(f"Could not open pose log {self.path}") from exc
        self._writer = csv.writer(self._fh)
        self._writer.writerow(self.HEADER)

    def append(self, ts_unix: float, frame_idx: int, target: str, event: str, pose: Pose,
               good_count: Optional[int] = None) -> None:
        rvec = np.asarray(pose.rvec, dtype=np.float64).reshape(3)
        tvec = np.asarray(pose.tvec, dtype=np.float64).reshape(3)
        values = [*rvec, *tvec, *camera_position(pose)]
        self._writer.writerow([
            f"{ts_unix:.6f}", frame_idx, target, event,
            "" if good_count is None else good_count,
            *(f"{v:.6f}" for v in values),
        ])

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
            self._writer = None
