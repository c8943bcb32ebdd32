"""Camera sessions: calibration, checkerboard AR and rectangle detect/track AR."""

from .config import SessionConfig
from .worker import FrameLoop

__all__ = ["SessionConfig", "FrameLoop"]
