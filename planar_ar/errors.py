"""Error kinds shared by the calibration, pose and tracking components."""

from enum import Enum


class ErrorKind(Enum):
    IO_FAILURE = "IoFailure"
    PARSE_FAILURE = "ParseFailure"
    NOT_FOUND = "NotFound"
    UNDERDETERMINED = "Underdetermined"
    POSE_FAILURE = "PoseFailure"
    INDEX_OUT_OF_RANGE = "IndexOutOfRange"


class ArError(Exception):
    """Base error; ``kind`` tells callers which recovery policy applies."""

    kind = None

    def __init__(self, message: str, kind: ErrorKind | None = None):
        if kind is not None:
            self.kind = kind
        super().__init__(message)


class IoFailure(ArError):
    """Camera, model or intrinsics file could not be opened, read or written."""

    kind = ErrorKind.IO_FAILURE


class ParseFailure(ArError):
    """Input was readable but produced no usable content."""

    kind = ErrorKind.PARSE_FAILURE


class Underdetermined(ArError):
    """Intrinsic fit attempted without enough samples (or without convergence)."""

    kind = ErrorKind.UNDERDETERMINED

    def __init__(self, message: str, sample_count: int = 0, required_count: int = 5):
        self.sample_count = sample_count
        self.required_count = required_count
        super().__init__(f"{message} (samples: {sample_count}, required: {required_count})")


class PoseFailure(ArError):
    """solvePnP rejected the correspondences or raised."""

    kind = ErrorKind.POSE_FAILURE
