import cv2, numpy as np
from pathlib import Path

from ..ar_types import CameraIntrinsics
from ..errors import IoFailure, ParseFailure

CAMERA_MATRIX_KEY = "CameraMatrix"
DIST_COEFFS_KEY = "DistortionCoefficients"
REPROJ_ERROR_KEY = "ReprojectionError"


def load_calib(path: str | Path) -> CameraIntrinsics:
    p = Path(path)
    if not p.is_file():
        raise IoFailure(f"Could not open calibration file {p}")
    try:
        fs = cv2.FileStorage(str(p), cv2.FILE_STORAGE_READ)
    except cv2.error as exc:
        raise ParseFailure(f"Unreadable calibration file {p}: {exc}") from exc
    if not fs.isOpened():
        raise IoFailure(f"Could not open calibration file {p}")
    try:
        k_node = fs.getNode(CAMERA_MATRIX_KEY)
        d_node = fs.getNode(DIST_COEFFS_KEY)
        if k_node.empty() or d_node.empty():
            raise ParseFailure(
                f"{p} lacks {CAMERA_MATRIX_KEY} or {DIST_COEFFS_KEY}"
            )
        K = np.asarray(k_node.mat(), dtype=np.float64)
        dist = np.asarray(d_node.mat(), dtype=np.float64).reshape(-1, 1)
        e_node = fs.getNode(REPROJ_ERROR_KEY)
        err = None if e_node.empty() else float(e_node.real())
    finally:
        fs.release()
    if K.shape != (3, 3):
        raise ParseFailure(f"{CAMERA_MATRIX_KEY} in {p} is {K.shape}, expected (3, 3)")
    return CameraIntrinsics(K, dist, err)


def save_calib(path: str | Path, intrinsics: CameraIntrinsics) -> None:
    p = Path(path)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IoFailure(f"Could not create {p.parent}") from exc
    fs = cv2.FileStorage(str(p), cv2.FILE_STORAGE_WRITE)
    if not fs.isOpened():
        raise IoFailure(f"Could not open {p} for writing")
    try:
        fs.write(CAMERA_MATRIX_KEY, np.asarray(intrinsics.K, dtype=np.float64))
        fs.write(DIST_COEFFS_KEY, np.asarray(intrinsics.dist, dtype=np.float64).reshape(-1, 1))
        if intrinsics.reprojection_error is not None:
            fs.write(REPROJ_ERROR_KEY, float(intrinsics.reprojection_error))
    finally:
        fs.release()
