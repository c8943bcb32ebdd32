from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from planar_ar.ar_types import Pose
from planar_ar.services.pose_log import PoseLogWriter


class OutputSink(ABC):
    @abstractmethod
    def open(self) -> None: ...

    @abstractmethod
    def write_pose(self, ts_unix: float, frame_idx: int, target: str, event: str, pose: Pose,
                   good_count: Optional[int] = None) -> None: ...

    @abstractmethod
    def close(self) -> None: ...


class CsvOutput(OutputSink):
    def __init__(self, path: str | Path):
        self._writer = PoseLogWriter(path)
        self._open = False

    def open(self) -> None:
        self._writer.open()
        self._open = True

    def write_pose(self, ts_unix: float, frame_idx: int, target: str, event: str, pose: Pose,
                   good_count: Optional[int] = None) -> None:
        if self._open:
            self._writer.append(ts_unix, frame_idx, target, event, pose, good_count)

    def close(self) -> None:
        self._writer.close()
        self._open = False


class NullOutput(OutputSink):
    def open(self) -> None:
        return None

    def write_pose(self, ts_unix: float, frame_idx: int, target: str, event: str, pose: Pose,
                   good_count: Optional[int] = None) -> None:
        return None

    def close(self) -> None:
        return None


def build_output(pose_csv: Optional[str]) -> OutputSink:
    if pose_csv:
        return CsvOutput(pose_csv)
    return NullOutput()
