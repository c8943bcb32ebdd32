"""Two-state driver that alternates rectangle detection and corner tracking."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .ar_types import StepResult, TrackState
from .strategies.detect_rectangle import RectangleDetect
from .strategies.track_flow import LKFlowTrack


logger = logging.getLogger(__name__)

NOT_DETECTED_HINT = "Target not detected"


class DetectTrackMachine:
    """
    DETECTING: run the contour detector every frame until it returns four
    ordered corners, then keep a copy of that frame as the flow reference.

    TRACKING: move the corners with sparse optical flow. Every corner must
    survive; a lost corner is never written back. On success corners and
    reference are replaced, otherwise both are cleared and the machine goes
    back to DETECTING. The lost frame is not re-detected; the next one is.
    """

    def __init__(self, detector: RectangleDetect | None = None, tracker: LKFlowTrack | None = None):
        self.detector = detector or RectangleDetect()
        self.tracker = tracker or LKFlowTrack()

        self.state = TrackState.DETECTING
        self.corners: Optional[np.ndarray] = None
        self.reference: Optional[np.ndarray] = None

    @property
    def is_tracking(self) -> bool:
        return self.state is TrackState.TRACKING

    def reset(self) -> None:
        self.state = TrackState.DETECTING
        self.corners = None
        self.reference = None

    def step(self, frame: np.ndarray) -> StepResult:
        if self.state is TrackState.DETECTING:
            return self._detect(frame)
        return self._track(frame)

    def _detect(self, frame: np.ndarray) -> StepResult:
        corners = self.detector.detect(frame)
        if corners is None:
            return StepResult(TrackState.DETECTING, None, "not_detected", hint=NOT_DETECTED_HINT)

        self.corners = np.asarray(corners, dtype=np.float64).reshape(4, 2)
        self.reference = frame.copy()
        self.state = TrackState.TRACKING
        logger.info("Target detected and locked.")
        return StepResult(TrackState.TRACKING, self.corners.copy(), "locked")

    def _track(self, frame: np.ndarray) -> StepResult:
        new_corners, status = self.tracker.track(self.reference, frame, self.corners)
        good = int(np.count_nonzero(status))

        if good < len(self.corners):
            self.reset()
            logger.info("Lost tracking (%d good points). Re-detecting target.", good)
            return StepResult(TrackState.DETECTING, None, "lost", hint=NOT_DETECTED_HINT, good_count=good)

        self.corners = np.asarray(new_corners, dtype=np.float64).reshape(4, 2)
        self.reference = frame.copy()
        return StepResult(TrackState.TRACKING, self.corners.copy(), "tracked", good_count=good)
