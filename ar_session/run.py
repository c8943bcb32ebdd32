"""Command-line plumbing shared by the calibrate / pose_demo / ar_detect / orb_demo executables."""

import argparse
import logging
import signal

from planar_ar.errors import ArError

from .config import SessionConfig, load_config
from .worker import FrameLoop


def build_parser(description: str) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description=description)
    ap.add_argument("--config", help="Path to JSON/YAML config")

    ap.add_argument("--device", help="Camera index, /dev/videoN, or a video file")
    ap.add_argument("--fps", type=int)
    ap.add_argument("--width", type=int)
    ap.add_argument("--height", type=int)
    ap.add_argument("--calib", help="Intrinsics file (default ../calibration/intrinsics.yaml)")
    ap.add_argument("--max-frames", type=int)
    ap.add_argument("--wait-ms", type=int)
    ap.add_argument("--headless", action="store_true", help="Run without a window")
    ap.add_argument("--log-level")
    ap.add_argument("--log-file")
    return ap


def apply_args(cfg: SessionConfig, args: argparse.Namespace) -> SessionConfig:
    device = args.device
    if isinstance(device, str) and device.isdigit():
        device = int(device)

    cfg.apply_overrides(
        device=device,
        fps=args.fps,
        width=args.width,
        height=args.height,
        calibration_path=args.calib,
        max_frames=args.max_frames,
        wait_ms=args.wait_ms,
        headless=args.headless if args.headless else None,
        log_level=args.log_level.upper() if args.log_level else None,
        log_file=args.log_file,
    )
    return cfg


def load_session_config(args: argparse.Namespace, session_name: str) -> SessionConfig:
    cfg = load_config(args.config) if args.config else SessionConfig()
    cfg.session_name = session_name if not args.config else cfg.session_name
    return apply_args(cfg, args)


def run_loop(loop: FrameLoop) -> int:
    """Run ``loop`` to completion; startup I/O failures map to exit code 1."""

    def _handle_signal(_sig, _frame):
        loop.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handle_signal)

    try:
        summary = loop.run()
    except ArError as exc:
        loop.logger.error("%s: %s", exc.kind.value, exc)
        return 1
    print(summary)
    return 0


def startup_failure(logger: logging.Logger, exc: Exception) -> int:
    kind = getattr(getattr(exc, "kind", None), "value", type(exc).__name__)
    logger.error("%s: %s", kind, exc)
    return 1
