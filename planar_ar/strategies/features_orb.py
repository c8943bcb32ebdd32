import cv2
import numpy as np

from .preprocess import to_gray


class OrbFeatures:
    """ORB keypoints and descriptors with a fixed detector configuration."""

    def __init__(self, n_features: int = 500, fast_threshold: int = 20):
        self.orb = cv2.ORB_create(
            nfeatures=n_features,
            scaleFactor=1.2,
            nlevels=8,
            edgeThreshold=31,
            firstLevel=0,
            WTA_K=2,
            scoreType=cv2.ORB_HARRIS_SCORE,
            patchSize=31,
            fastThreshold=fast_threshold,
        )

    def detect(self, image: np.ndarray):
        keypoints, descriptors = self.orb.detectAndCompute(to_gray(image), None)
        return keypoints, descriptors

    def draw(self, image: np.ndarray, keypoints) -> np.ndarray:
        return cv2.drawKeypoints(
            image, keypoints, None, (0, 255, 0), cv2.DRAW_MATCHES_FLAGS_DRAW_RICH_KEYPOINTS
        )
