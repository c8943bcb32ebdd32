"""Wireframe AR over a checkerboard: pyramid by default, or an OBJ model."""

import sys
import time

import numpy as np

from planar_ar.ar_types import Frame, Model
from planar_ar.errors import ArError, PoseFailure
from planar_ar.factory import StrategyFactory
from planar_ar.pose_engine import PoseEngine
from planar_ar.services.calib import load_calib
from planar_ar.services.model_transform import adjust_model, pyramid_model
from planar_ar.services.obj_loader import load_obj
from planar_ar.strategies.render import GREEN, put_hint
from planar_ar.transforms import camera_position

from .logging_utils import setup_logger
from .output import OutputSink, build_output
from .run import build_parser, load_session_config, run_loop, startup_failure
from .worker import FrameLoop

POSE_FAILED_HINT = "Pose estimation failed"


def load_model(config) -> Model:
    """OBJ model when configured, else the built-in pyramid; lifted above the target."""
    model = load_obj(config.model_path) if config.model_path else pyramid_model()
    adjust_model(model.vertices, config.model_scale, config.model_z_offset)
    return model


def annotate_camera_position(image: np.ndarray, pose) -> None:
    c = camera_position(pose)
    put_hint(image, f"cam ({c[0]:.1f}, {c[1]:.1f}, {c[2]:.1f})",
             origin=(10, image.shape[0] - 15), color=GREEN, scale=0.5)


class PoseDemoSession(FrameLoop):
    window_name = "Camera Pose & Virtual Object"

    def __init__(self, config, engine: PoseEngine, model: Model, output: OutputSink | None = None, **kwargs):
        super().__init__(config, **kwargs)
        self.engine = engine
        self.model = model
        self.output = output or build_output(config.pose_csv)
        self.last_pose = None

    def on_start(self) -> None:
        self.output.open()

    def process(self, frame: Frame) -> np.ndarray:
        image = frame.image.copy()
        self.last_pose = None
        corr = self.engine.detect_checkerboard(image)
        if corr is None:
            return image

        self.engine.checkerboard.draw(image, corr.image_points)
        try:
            pose = self.engine.overlay(image, self.model, corr)
        except PoseFailure as exc:
            self.logger.warning("%s: %s", POSE_FAILED_HINT, exc)
            put_hint(image, POSE_FAILED_HINT)
            return image

        self.last_pose = pose
        annotate_camera_position(image, pose)
        self.output.write_pose(time.time(), frame.idx, "checkerboard", "detected", pose)
        return image

    def on_finish(self) -> None:
        self.output.close()


def main(argv=None) -> int:
    ap = build_parser("AR wireframe over a checkerboard")
    ap.add_argument("--model", help="OBJ model (default: built-in pyramid)")
    ap.add_argument("--scale", type=float)
    ap.add_argument("--z-offset", type=float)
    ap.add_argument("--pose-csv")
    args = ap.parse_args(argv)

    cfg = load_session_config(args, "pose_demo")
    cfg.apply_overrides(
        model_path=args.model,
        model_scale=args.scale,
        model_z_offset=args.z_offset,
        pose_csv=args.pose_csv,
    )
    logger = setup_logger(cfg.session_name, cfg.log_level)
    try:
        intrinsics = load_calib(cfg.calibration_path)
        model = load_model(cfg)
    except ArError as exc:
        return startup_failure(logger, exc)
    logger.info("Loaded Camera Matrix:\n%s", intrinsics.K)
    logger.info("Loaded Distortion Coefficients: %s", intrinsics.dist.ravel())

    engine = StrategyFactory.pose_engine(cfg, intrinsics)
    return run_loop(PoseDemoSession(cfg, engine, model, logger=logger))


if __name__ == "__main__":
    sys.exit(main())
