import time
import re
from abc import ABC, abstractmethod
from typing import Any

import cv2

from planar_ar.ar_types import Frame
from planar_ar.errors import IoFailure


class BaseCapture(ABC):
    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def next_frame(self) -> Frame | None: ...

    @abstractmethod
    def stop(self) -> None: ...


class OpenCVCapture(BaseCapture):
    """Camera index, ``/dev/videoN`` node, or a video file for offline replay."""

    def __init__(self, device: int | str, fps: int, width: int, height: int):
        self.device = device
        self.fps = fps
        self.width = width
        self.height = height
        self.cap: Any = None
        self.idx = 0

    def start(self) -> None:
        if isinstance(self.device, int):
            self.cap = cv2.VideoCapture(self.device)
        else:
            dev_str = str(self.device)
            match = re.match(r"^/dev/video(\d+)$", dev_str)
            if match:
                dev_idx = int(match.group(1))
                self.cap = cv2.VideoCapture(dev_idx, cv2.CAP_V4L2)
            else:
                self.cap = cv2.VideoCapture(dev_str)

        if not self.cap.isOpened():
            raise IoFailure(f"Could not open the camera: {self.device}")

        if isinstance(self.device, int) or str(self.device).startswith("/dev/video"):
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
            self.cap.set(cv2.CAP_PROP_FPS, self.fps)
        self.idx = 0

    def next_frame(self) -> Frame | None:
        ok, img = self.cap.read()
        if not ok or img is None:
            return None
        self.idx += 1
        ts = time.strftime("%Y-%m-%dT%H:%M:%S")
        return Frame(self.idx, ts, img)

    def stop(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None
