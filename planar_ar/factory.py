from .ar_types import CameraIntrinsics
from .config import CheckerboardConfig, FlowConfig, RectangleConfig
from .detect_track import DetectTrackMachine
from .pose_engine import PoseEngine
from .strategies.detect_checkerboard import CheckerboardDetect
from .strategies.detect_rectangle import RectangleDetect
from .strategies.localize_pnp import PnPLocalize
from .strategies.render import WireframeRenderer
from .strategies.track_flow import LKFlowTrack


class StrategyFactory:
    @staticmethod
    def from_config(config):
        board = getattr(config, "checkerboard", None) or CheckerboardConfig()
        target = getattr(config, "rectangle", None) or RectangleConfig()
        flow = getattr(config, "flow", None) or FlowConfig()

        checker = CheckerboardDetect(board)
        rect = RectangleDetect(target)
        tracker = LKFlowTrack(flow)
        renderer = WireframeRenderer()
        return checker, rect, tracker, renderer

    @staticmethod
    def pose_engine(config, intrinsics: CameraIntrinsics) -> PoseEngine:
        checker, _rect, _tracker, renderer = StrategyFactory.from_config(config)
        return PoseEngine(
            intrinsics,
            board=checker.cfg,
            target=getattr(config, "rectangle", None),
            checkerboard=checker,
            localizer=PnPLocalize(intrinsics),
            renderer=renderer,
            axis_length=getattr(config, "axis_length", 3.0),
        )

    @staticmethod
    def detect_track(config) -> DetectTrackMachine:
        _checker, rect, tracker, _renderer = StrategyFactory.from_config(config)
        return DetectTrackMachine(rect, tracker)
