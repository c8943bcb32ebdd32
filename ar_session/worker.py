from __future__ import annotations

import time
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from planar_ar.ar_types import Frame

from .capture import BaseCapture, OpenCVCapture
from .config import SessionConfig
from .display import ESC, Display, HeadlessDisplay, WindowDisplay
from .logging_utils import add_file_handler, setup_logger


@dataclass
class SessionSummary:
    session_name: str
    frames_processed: int
    avg_fps: float
    errors: int


class FrameLoop(ABC):
    """
    Single-threaded capture -> process -> show -> poll loop.

    Subclasses implement ``process`` (one whole frame, returning the annotated
    image) and optionally ``on_key``. Camera and window are released on every
    exit path.
    """

    window_name = "AR"

    def __init__(
        self,
        config: SessionConfig,
        logger=None,
        capture: Optional[BaseCapture] = None,
        display: Optional[Display] = None,
    ):
        self.config = config
        self.logger = logger or setup_logger(config.session_name, config.log_level)
        if config.log_file:
            add_file_handler(self.logger, config.session_name, config.log_file)
        self.capture = capture
        self.display = display
        self._stop_event = threading.Event()
        self.errors = 0

    def stop(self) -> None:
        self._stop_event.set()

    def _build_capture(self) -> BaseCapture:
        if self.capture is not None:
            return self.capture
        return OpenCVCapture(
            self.config.device,
            self.config.fps,
            self.config.width,
            self.config.height,
        )

    def _build_display(self) -> Display:
        if self.display is not None:
            return self.display
        if self.config.headless:
            return HeadlessDisplay()
        return WindowDisplay(self.window_name)

    def on_start(self) -> None:
        return None

    @abstractmethod
    def process(self, frame: Frame) -> np.ndarray: ...

    def on_key(self, key: int) -> None:
        return None

    def on_finish(self) -> None:
        return None

    def run(self) -> SessionSummary:
        cap = self._build_capture()
        display = self._build_display()

        self.on_start()
        t0 = time.time()
        frames = 0

        try:
            cap.start()
            display.open()
            while True:
                if self._stop_event.is_set():
                    break
                if self.config.max_frames and frames >= self.config.max_frames:
                    break

                f = cap.next_frame()
                if f is None:
                    self.logger.error("Captured empty frame.")
                    self.errors += 1
                    break

                annotated = self.process(f)
                display.show(annotated)
                frames += 1

                key = display.poll(self.config.wait_ms)
                if key is None:
                    continue
                if key == ESC:
                    break
                self.on_key(key)
        finally:
            try:
                cap.stop()
            finally:
                try:
                    display.close()
                finally:
                    self.on_finish()

        avg = frames / max(1e-6, (time.time() - t0))
        self.logger.info("summary frames=%d avg_fps=%.2f errors=%d", frames, avg, self.errors)
        return SessionSummary(self.config.session_name, frames, avg, self.errors)
