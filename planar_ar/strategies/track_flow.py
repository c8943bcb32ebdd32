import cv2
import numpy as np

from ..config import FlowConfig
from .preprocess import to_gray


class LKFlowTrack:
    """
    Strategy: sparse pyramidal Lucas-Kanade flow over a handful of points.

    ``track`` returns the moved points and one status bit per point. A bit is
    set only when flow converged and the moved point lies inside the frame;
    LK alone keeps points up to half a window past the border.
    """
    def __init__(self, config: FlowConfig | None = None):
        self.cfg = config or FlowConfig()
        self.lk_params = dict(
            winSize=(self.cfg.win_size, self.cfg.win_size),
            maxLevel=self.cfg.max_level,
            criteria=(
                cv2.TERM_CRITERIA_EPS | cv2.TERM_CRITERIA_COUNT,
                self.cfg.max_iter,
                self.cfg.eps,
            ),
        )

    def track(self, prev_image, curr_image, points) -> tuple[np.ndarray, np.ndarray]:
        prev_gray = to_gray(prev_image)
        curr_gray = to_gray(curr_image)
        p0 = np.asarray(points, dtype=np.float32).reshape(-1, 1, 2)

        p1, status, _err = cv2.calcOpticalFlowPyrLK(prev_gray, curr_gray, p0, None, **self.lk_params)
        if p1 is None or status is None:
            return p0.reshape(-1, 2).astype(np.float64), np.zeros(len(p0), dtype=np.uint8)

        status = status.reshape(-1).astype(np.uint8)
        new_pts = p1.reshape(-1, 2).astype(np.float64)

        # points pushed outside the frame count as lost
        h, w = curr_gray.shape[:2]
        inside = (
            (new_pts[:, 0] >= 0) & (new_pts[:, 0] < w)
            & (new_pts[:, 1] >= 0) & (new_pts[:, 1] < h)
        )
        status &= inside.astype(np.uint8)
        return new_pts, status
