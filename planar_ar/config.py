from dataclasses import dataclass, asdict
from typing import Any


@dataclass
class CheckerboardConfig:
    cols: int = 9   # internal corners per row
    rows: int = 6   # internal corners per column
    subpix_window: int = 11
    subpix_eps: float = 0.1
    subpix_max_iter: int = 30
    fast_check: bool = True

    @property
    def pattern_size(self) -> tuple[int, int]:
        return self.cols, self.rows

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RectangleConfig:
    width: float = 8.0
    height: float = 6.0
    blur_ksize: int = 5
    canny_low: float = 50.0
    canny_high: float = 150.0
    approx_epsilon: float = 0.02  # fraction of the contour perimeter
    min_area: float = 1000.0
    ratio_tolerance: float = 0.5

    @property
    def expected_ratio(self) -> float:
        ratio = self.width / self.height
        return ratio if ratio >= 1.0 else 1.0 / ratio

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class FlowConfig:
    win_size: int = 21
    max_level: int = 3
    max_iter: int = 30
    eps: float = 0.01

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class CalibrationConfig:
    capture_scale: float = 0.5
    min_samples: int = 5
    fix_aspect_ratio: bool = True

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
