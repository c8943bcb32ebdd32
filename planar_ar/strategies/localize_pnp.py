import cv2, numpy as np

from ..ar_types import CameraIntrinsics, Pose
from ..errors import PoseFailure


class PnPLocalize:
    def __init__(self, intrinsics: CameraIntrinsics):
        self.intrinsics = intrinsics

    @property
    def K(self):
        return self.intrinsics.K

    @property
    def dist(self):
        return self.intrinsics.dist

    def estimate(self, object_points, image_points) -> Pose:
        obj = np.asarray(object_points, dtype=np.float64).reshape(-1, 3)
        img = np.asarray(image_points, dtype=np.float64).reshape(-1, 2)
        if len(obj) != len(img):
            raise PoseFailure(f"{len(obj)} object points vs {len(img)} image points")
        if len(obj) < 4:
            raise PoseFailure(f"need at least 4 correspondences, got {len(obj)}")

        try:
            ok, rvec, tvec = cv2.solvePnP(obj, img, self.K, self.dist)
        except cv2.error as exc:
            raise PoseFailure(f"solvePnP raised: {exc}") from exc
        if not ok:
            raise PoseFailure("solvePnP did not converge")
        return Pose(rvec.reshape(3, 1), tvec.reshape(3, 1))
