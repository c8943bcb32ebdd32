import numpy as np

from planar_ar.config import RectangleConfig
from planar_ar.strategies.detect_rectangle import RectangleDetect


def test_detects_target_corners_in_order(rectangle_frame):
    image = rectangle_frame((200, 150, 160, 120))
    corners = RectangleDetect().detect(image)

    assert corners is not None
    assert corners.shape == (4, 2)
    np.testing.assert_allclose(
        corners,
        [[200, 150], [359, 150], [359, 269], [200, 269]],
        atol=3.0,
    )


def test_portrait_target_matches_normalised_ratio(rectangle_frame):
    image = rectangle_frame((250, 100, 120, 160))
    assert RectangleDetect().detect(image) is not None


def test_rejects_small_quadrilateral(rectangle_frame):
    image = rectangle_frame((100, 100, 30, 20))
    assert RectangleDetect().detect(image) is None


def test_rejects_elongated_quadrilateral(rectangle_frame):
    image = rectangle_frame((100, 200, 300, 50))
    assert RectangleDetect().detect(image) is None


def test_blank_frame_returns_none():
    assert RectangleDetect().detect(np.zeros((480, 640, 3), dtype=np.uint8)) is None


def test_largest_candidate_wins(rectangle_frame):
    image = rectangle_frame((20, 20, 80, 60), (300, 200, 240, 180))
    corners = RectangleDetect().detect(image)
    assert corners is not None
    assert corners[0][0] > 250
    assert corners[2][0] > 500


def test_ratio_tolerance_is_configurable(rectangle_frame):
    image = rectangle_frame((100, 200, 300, 100))  # ratio 3
    assert RectangleDetect().detect(image) is None
    loose = RectangleDetect(RectangleConfig(ratio_tolerance=2.0))
    assert loose.detect(image) is not None
