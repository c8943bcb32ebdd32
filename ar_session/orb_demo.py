"""Live ORB keypoint viewer."""

import sys

import numpy as np

from planar_ar.ar_types import Frame
from planar_ar.strategies.features_orb import OrbFeatures

from .run import build_parser, load_session_config, run_loop
from .worker import FrameLoop


class OrbDemoSession(FrameLoop):
    window_name = "ORB Feature Detection"

    def __init__(self, config, features: OrbFeatures | None = None, **kwargs):
        super().__init__(config, **kwargs)
        self.features = features or OrbFeatures()
        self.last_count = 0

    def process(self, frame: Frame) -> np.ndarray:
        keypoints, _desc = self.features.detect(frame.image)
        self.last_count = len(keypoints)
        return self.features.draw(frame.image, keypoints)


def main(argv=None) -> int:
    ap = build_parser("Show ORB keypoints on the camera stream")
    ap.add_argument("--n-features", type=int, default=500)
    ap.add_argument("--fast-threshold", type=int, default=20)
    args = ap.parse_args(argv)

    cfg = load_session_config(args, "orb_demo")
    if args.wait_ms is None:
        cfg.wait_ms = 30
    features = OrbFeatures(args.n_features, args.fast_threshold)
    return run_loop(OrbDemoSession(cfg, features=features))


if __name__ == "__main__":
    sys.exit(main())
