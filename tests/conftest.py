import cv2
import numpy as np
import pytest

from planar_ar.ar_types import CameraIntrinsics, Frame
from planar_ar.patterns import object_point_grid


@pytest.fixture
def intrinsics():
    """Pinhole camera, 640x480, no distortion."""
    K = np.array([[800.0, 0.0, 320.0], [0.0, 800.0, 240.0], [0.0, 0.0, 1.0]])
    return CameraIntrinsics(K, np.zeros((5, 1)), 0.1)


@pytest.fixture
def checkerboard_image():
    """Render a white-bordered board; 10x7 squares gives 9x6 inner corners."""
    def _make(cols=10, rows=7, square=50, margin=60):
        h = rows * square + 2 * margin
        w = cols * square + 2 * margin
        img = np.full((h, w), 255, dtype=np.uint8)
        for r in range(rows):
            for c in range(cols):
                if (r + c) % 2 == 0:
                    y0 = margin + r * square
                    x0 = margin + c * square
                    img[y0:y0 + square, x0:x0 + square] = 0
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    return _make


@pytest.fixture
def rectangle_frame():
    """Black frame with filled white rectangles given as (x, y, w, h)."""
    def _make(*rects, size=(480, 640)):
        img = np.zeros((size[0], size[1], 3), dtype=np.uint8)
        for (x, y, w, h) in rects:
            cv2.rectangle(img, (x, y), (x + w - 1, y + h - 1), (255, 255, 255), -1)
        return img
    return _make


@pytest.fixture
def calibration_views(intrinsics):
    """Five tilted views of the 9x6 grid projected through ``intrinsics``."""
    grid = object_point_grid(9, 6)
    rvecs = [
        [0.3, 0.0, 0.0],
        [-0.3, 0.0, 0.0],
        [0.0, 0.3, 0.0],
        [0.0, -0.3, 0.0],
        [0.2, 0.2, 0.1],
    ]
    views = []
    for rv in rvecs:
        pts, _ = cv2.projectPoints(
            grid,
            np.array(rv, dtype=np.float64),
            np.array([-4.0, 2.5, 20.0]),
            intrinsics.K,
            intrinsics.dist,
        )
        views.append(pts.reshape(-1, 2).astype(np.float32))
    return views


class FakeCapture:
    def __init__(self, images):
        """Queue deterministic images to emulate a camera."""
        self.images = list(images)
        self.started = False
        self.stopped = False
        self.idx = 0

    def start(self):
        self.started = True

    def next_frame(self):
        """Return the next frame or None when depleted."""
        if not self.images:
            return None
        self.idx += 1
        return Frame(self.idx, f"ts_{self.idx}", self.images.pop(0))

    def stop(self):
        self.stopped = True


class ScriptedDisplay:
    def __init__(self, keys=()):
        """Replay ``keys`` (chars or codes, None for no key) one per poll."""
        self.keys = [ord(k) if isinstance(k, str) else k for k in keys]
        self.shown = []
        self.opened = False
        self.closed = False

    def open(self):
        self.opened = True

    def show(self, image):
        self.shown.append(image)

    def poll(self, wait_ms):
        if self.keys:
            return self.keys.pop(0)
        return None

    def close(self):
        self.closed = True


@pytest.fixture
def fake_capture():
    return FakeCapture


@pytest.fixture
def scripted_display():
    return ScriptedDisplay


class ScriptedDetector:
    """Checkerboard detector stand-in: queued corner sets, then None."""

    def __init__(self, views):
        self.views = list(views)
        self.drawn = 0

    def detect(self, image):
        if not self.views:
            return None
        return self.views.pop(0)

    def draw(self, image, corners):
        self.drawn += 1
        return image


@pytest.fixture
def scripted_detector():
    return ScriptedDetector
