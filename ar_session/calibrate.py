"""Interactive checkerboard calibration.

Keys: ``s`` save the last valid detection, ``c`` run the intrinsic fit
(needs 5 saved frames), ``w`` write intrinsics, ``ESC`` quit.
"""

import sys

import numpy as np

from planar_ar.ar_types import Frame
from planar_ar.errors import ArError, Underdetermined
from planar_ar.services.calibration_store import CalibrationStore
from planar_ar.services.storage import CalibrationStorage
from planar_ar.strategies.render import GREEN, put_hint

from .run import build_parser, load_session_config, run_loop
from .worker import FrameLoop

INSTRUCTIONS = "Press 's' to save frame, 'c' to calibrate, 'w' to write params"


class CalibrationSession(FrameLoop):
    window_name = "Checkerboard Calibration"

    def __init__(self, config, store: CalibrationStore | None = None, storage: CalibrationStorage | None = None, **kwargs):
        super().__init__(config, **kwargs)
        self.store = store or CalibrationStore(config.checkerboard, config.calibration)
        self.storage = storage or CalibrationStorage(config.calibration_dir)

    def on_start(self) -> None:
        self.logger.info(
            "Press 's' to save a calibration frame, 'c' to calibrate (min %d frames), "
            "and 'w' to write intrinsic parameters to file.",
            self.store.cfg.min_samples,
        )

    def process(self, frame: Frame) -> np.ndarray:
        overlay = self.store.capture_candidate(frame.image)
        put_hint(overlay, INSTRUCTIONS, origin=(10, 30), color=GREEN, scale=0.6)
        return overlay

    def on_key(self, key: int) -> None:
        ch = chr(key).lower()
        if ch == "s":
            self.store.commit_last_valid()
        elif ch == "c":
            self.fit()
        elif ch == "w":
            self.write()

    def fit(self) -> bool:
        try:
            self.store.run_fit()
        except Underdetermined as exc:
            self.logger.warning("%s", exc)
            return False
        return True

    def write(self) -> bool:
        if not self.store.calibrated:
            self.logger.warning("Camera not calibrated yet. Press 'c' to calibrate.")
            return False
        try:
            self.store.persist(self.config.calibration_path)
        except ArError as exc:
            self.logger.error("Could not write intrinsics: %s", exc)
            return False
        return True

    def on_finish(self) -> None:
        if not self.config.save_calibration_images or not self.store.samples:
            return
        try:
            paths = self.storage.save_images([s.image for s in self.store.samples])
            self.storage.write_manifest(self.config.as_dict())
        except ArError as exc:
            self.logger.error("Could not save calibration images: %s", exc)
            return
        self.logger.info("Total calibration images saved to disk: %d", len(paths))


def main(argv=None) -> int:
    ap = build_parser("Calibrate a camera from checkerboard views")
    ap.add_argument("--calib-dir", help="Directory for calibration images")
    ap.add_argument("--no-save-images", action="store_true")
    args = ap.parse_args(argv)

    cfg = load_session_config(args, "calibrate")
    cfg.apply_overrides(
        calibration_dir=args.calib_dir,
        save_calibration_images=False if args.no_save_images else None,
    )
    return run_loop(CalibrationSession(cfg))


if __name__ == "__main__":
    sys.exit(main())
