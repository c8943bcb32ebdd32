from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from planar_ar.config import CalibrationConfig, CheckerboardConfig, FlowConfig, RectangleConfig


@dataclass
class SessionConfig:
    session_name: str = "ar"
    device: int | str = 0
    fps: int = 30
    width: int = 640
    height: int = 480
    calibration_path: str = "../calibration/intrinsics.yaml"
    calibration_dir: str = "../calibration"
    model_path: Optional[str] = None
    model_scale: float = 1.0
    model_z_offset: float = 5.0
    axis_length: float = 3.0
    wait_ms: int = 10
    max_frames: Optional[int] = None
    headless: bool = False
    save_calibration_images: bool = True
    pose_csv: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None
    checkerboard: CheckerboardConfig = field(default_factory=CheckerboardConfig)
    rectangle: RectangleConfig = field(default_factory=RectangleConfig)
    flow: FlowConfig = field(default_factory=FlowConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    def apply_overrides(self, **kwargs: Any) -> "SessionConfig":
        for key, value in kwargs.items():
            if value is not None and hasattr(self, key):
                setattr(self, key, value)
        return self


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError("YAML config root must be a mapping")
    return data


def _load_section(cls, raw: Any):
    section = cls()
    if raw is None:
        return section
    if not isinstance(raw, dict):
        raise ValueError(f"{cls.__name__} section must be a mapping")
    for f in fields(cls):
        if f.name in raw:
            current = getattr(section, f.name)
            setattr(section, f.name, type(current)(raw[f.name]))
    return section


def load_config(path: str | Path) -> SessionConfig:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")

    if p.suffix.lower() in {".yaml", ".yml"}:
        raw = _load_yaml(p)
    else:
        with p.open("r", encoding="utf-8") as fp:
            raw = json.load(fp)

    if not isinstance(raw, dict):
        raise ValueError("Config root must be a JSON/YAML object")

    cfg = SessionConfig()
    cfg.session_name = str(raw.get("session_name", cfg.session_name))
    cfg.device = raw.get("device", cfg.device)
    cfg.fps = int(raw.get("fps", cfg.fps))
    cfg.width = int(raw.get("width", cfg.width))
    cfg.height = int(raw.get("height", cfg.height))
    cfg.calibration_path = str(raw.get("calibration_path", cfg.calibration_path))
    cfg.calibration_dir = str(raw.get("calibration_dir", cfg.calibration_dir))
    cfg.model_path = raw.get("model_path", cfg.model_path)
    cfg.model_scale = float(raw.get("model_scale", cfg.model_scale))
    cfg.model_z_offset = float(raw.get("model_z_offset", cfg.model_z_offset))
    cfg.axis_length = float(raw.get("axis_length", cfg.axis_length))
    cfg.wait_ms = int(raw.get("wait_ms", cfg.wait_ms))
    cfg.max_frames = raw.get("max_frames", cfg.max_frames)
    if cfg.max_frames is not None:
        cfg.max_frames = int(cfg.max_frames)
    cfg.headless = bool(raw.get("headless", cfg.headless))
    cfg.save_calibration_images = bool(raw.get("save_calibration_images", cfg.save_calibration_images))
    cfg.pose_csv = raw.get("pose_csv", cfg.pose_csv)
    cfg.log_level = str(raw.get("log_level", cfg.log_level)).upper()
    cfg.log_file = raw.get("log_file", cfg.log_file)

    cfg.checkerboard = _load_section(CheckerboardConfig, raw.get("checkerboard"))
    cfg.rectangle = _load_section(RectangleConfig, raw.get("rectangle"))
    cfg.flow = _load_section(FlowConfig, raw.get("flow"))
    cfg.calibration = _load_section(CalibrationConfig, raw.get("calibration"))

    return cfg
