"""Wireframe AR over a detected rectangular target, tracked with optical flow."""

import sys
import time

import numpy as np

from planar_ar.ar_types import Frame, Model
from planar_ar.detect_track import DetectTrackMachine
from planar_ar.errors import ArError, PoseFailure
from planar_ar.factory import StrategyFactory
from planar_ar.pose_engine import PoseEngine
from planar_ar.services.calib import load_calib
from planar_ar.strategies.render import draw_outline, put_hint

from .logging_utils import setup_logger
from .output import OutputSink, build_output
from .pose_demo import POSE_FAILED_HINT, annotate_camera_position, load_model
from .run import build_parser, load_session_config, run_loop, startup_failure
from .worker import FrameLoop

DEFAULT_MODEL = "../models/newcar.obj"


class ArDetectSession(FrameLoop):
    window_name = "AR Model with Detection & Tracking"

    def __init__(
        self,
        config,
        engine: PoseEngine,
        model: Model,
        machine: DetectTrackMachine | None = None,
        output: OutputSink | None = None,
        **kwargs,
    ):
        super().__init__(config, **kwargs)
        self.engine = engine
        self.model = model
        self.machine = machine or StrategyFactory.detect_track(config)
        self.output = output or build_output(config.pose_csv)
        self.last_step = None
        self.last_pose = None

    def on_start(self) -> None:
        self.output.open()

    def process(self, frame: Frame) -> np.ndarray:
        step = self.machine.step(frame.image)
        self.last_step = step
        self.last_pose = None
        image = frame.image.copy()

        if step.corners is None:
            put_hint(image, step.hint or "Target not detected")
            return image

        draw_outline(image, step.corners)
        corr = self.engine.rectangle_correspondences(step.corners)
        try:
            pose = self.engine.overlay(image, self.model, corr)
        except PoseFailure as exc:
            self.logger.warning("%s: %s", POSE_FAILED_HINT, exc)
            put_hint(image, POSE_FAILED_HINT)
            return image

        self.last_pose = pose
        annotate_camera_position(image, pose)
        self.output.write_pose(time.time(), frame.idx, "rectangle", step.event, pose, step.good_count)
        return image

    def on_finish(self) -> None:
        self.output.close()


def main(argv=None) -> int:
    ap = build_parser("AR wireframe over a detected and tracked rectangle")
    ap.add_argument("--model", help=f"OBJ model (default: {DEFAULT_MODEL})")
    ap.add_argument("--scale", type=float)
    ap.add_argument("--z-offset", type=float)
    ap.add_argument("--pose-csv")
    args = ap.parse_args(argv)

    cfg = load_session_config(args, "ar_detect")
    cfg.apply_overrides(
        model_path=args.model,
        model_scale=args.scale,
        model_z_offset=args.z_offset,
        pose_csv=args.pose_csv,
    )
    if cfg.model_path is None:
        cfg.model_path = DEFAULT_MODEL

    logger = setup_logger(cfg.session_name, cfg.log_level)
    try:
        intrinsics = load_calib(cfg.calibration_path)
        model = load_model(cfg)
    except ArError as exc:
        return startup_failure(logger, exc)
    logger.info("Loaded Camera Matrix:\n%s", intrinsics.K)
    logger.info("Loaded Distortion Coefficients: %s", intrinsics.dist.ravel())

    engine = StrategyFactory.pose_engine(cfg, intrinsics)
    return run_loop(ArDetectSession(cfg, engine, model, logger=logger))


if __name__ == "__main__":
    sys.exit(main())
