import cv2
import numpy as np

from ..config import RectangleConfig
from .preprocess import to_gray


def _pick(pts: np.ndarray, key: np.ndarray) -> np.ndarray:
    # smallest key; ties broken by point value so repeated ordering is stable
    idx = np.lexsort((pts[:, 1], pts[:, 0], key))[0]
    return pts[idx]


def order_points(pts) -> np.ndarray:
    """
    Order four image points as [top-left, top-right, bottom-right, bottom-left].

    top-left has the smallest x+y, bottom-right the largest; top-right has the
    largest x-y, bottom-left the smallest. This assumes the target is roughly
    axis-aligned in the image; past ~45 degrees of roll the labels can swap.
    """
    pts = np.asarray(pts, dtype=np.float64).reshape(4, 2)
    s = pts[:, 0] + pts[:, 1]
    d = pts[:, 0] - pts[:, 1]
    return np.array(
        [
            _pick(pts, s),
            _pick(pts, -d),
            _pick(pts, -s),
            _pick(pts, d),
        ],
        dtype=np.float64,
    )


class RectangleDetect:
    """
    Strategy: find the largest convex quadrilateral whose rotated-rect aspect
    ratio matches the target. Returns ordered (4,2) corners or None.
    """
    def __init__(self, config: RectangleConfig | None = None):
        self.cfg = config or RectangleConfig()

    def _aspect_ok(self, quad: np.ndarray) -> bool:
        (_cx, _cy), (w, h), _angle = cv2.minAreaRect(quad)
        if w == 0 or h == 0:
            return False
        ratio = w / h
        if ratio < 1.0:
            ratio = 1.0 / ratio
        return abs(ratio - self.cfg.expected_ratio) <= self.cfg.ratio_tolerance

    def candidates(self, image: np.ndarray) -> list[tuple[float, np.ndarray]]:
        gray = to_gray(image)
        k = self.cfg.blur_ksize
        blurred = cv2.GaussianBlur(gray, (k, k), 0)
        edges = cv2.Canny(blurred, self.cfg.canny_low, self.cfg.canny_high)
        contours, _hier = cv2.findContours(edges, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)

        found = []
        for contour in contours:
            peri = cv2.arcLength(contour, True)
            approx = cv2.approxPolyDP(contour, self.cfg.approx_epsilon * peri, True)
            if len(approx) != 4 or not cv2.isContourConvex(approx):
                continue
            area = cv2.contourArea(approx)
            if area < self.cfg.min_area:
                continue
            if not self._aspect_ok(approx):
                continue
            found.append((float(area), approx.reshape(4, 2)))
        return found

    def detect(self, image: np.ndarray) -> np.ndarray | None:
        found = self.candidates(image)
        if not found:
            return None
        _area, best = max(found, key=lambda c: c[0])
        return order_points(best)
