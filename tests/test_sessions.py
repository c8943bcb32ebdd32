import csv
from pathlib import Path
from unittest.mock import MagicMock

import cv2
import numpy as np
import pytest

from ar_session import ar_detect, calibrate, pose_demo
from ar_session.ar_detect import ArDetectSession
from ar_session.calibrate import CalibrationSession
from ar_session.config import SessionConfig
from ar_session.display import ESC, HeadlessDisplay
from ar_session.orb_demo import OrbDemoSession
from ar_session.pose_demo import PoseDemoSession, load_model
from planar_ar.ar_types import TrackState
from planar_ar.errors import PoseFailure
from planar_ar.factory import StrategyFactory
from planar_ar.services.calib import load_calib, save_calib
from planar_ar.services.calibration_store import CalibrationStore


def _blank():
    return np.zeros((480, 640, 3), dtype=np.uint8)


def _rows(path):
    with open(path, newline="") as fp:
        return list(csv.DictReader(fp))


def test_calibration_session_save_fit_write(tmp_path, fake_capture, scripted_display,
                                            scripted_detector, calibration_views, intrinsics):
    """Five 's' presses, then 'c' and 'w', leave intrinsics and images on disk."""
    cfg = SessionConfig(
        session_name="calibrate",
        calibration_path=str(tmp_path / "calibration" / "intrinsics.yaml"),
        calibration_dir=str(tmp_path / "calibration"),
    )
    store = CalibrationStore(detector=scripted_detector(calibration_views))
    cap = fake_capture([_blank() for _ in range(10)])
    display = scripted_display(["s", "s", "s", "s", "s", "c", "w", ESC])

    summary = CalibrationSession(cfg, store=store, capture=cap, display=display).run()

    assert summary.frames_processed == 8
    assert store.calibrated
    loaded = load_calib(cfg.calibration_path)
    assert loaded.fx == pytest.approx(intrinsics.fx, rel=0.05)

    images = sorted(p.name for p in (tmp_path / "calibration").glob("calibration_image_*.png"))
    assert len(images) == 5
    assert (tmp_path / "calibration" / "calibration_session.json").exists()


def test_calibration_session_fit_too_early(tmp_path, fake_capture, scripted_display,
                                           scripted_detector, calibration_views, caplog):
    cfg = SessionConfig(
        session_name="calibrate",
        calibration_path=str(tmp_path / "intrinsics.yaml"),
        calibration_dir=str(tmp_path),
        save_calibration_images=False,
    )
    store = CalibrationStore(detector=scripted_detector(calibration_views))
    display = scripted_display(["s", "s", "c", "w", ESC])
    session = CalibrationSession(cfg, store=store, capture=fake_capture([_blank() for _ in range(5)]),
                                 display=display)

    session.run()

    assert len(store.samples) == 2
    assert not store.calibrated
    assert not (tmp_path / "intrinsics.yaml").exists()
    assert not list(tmp_path.glob("*.png"))
    assert "samples: 2, required: 5" in caplog.text
    assert "Camera not calibrated yet" in caplog.text


def test_pose_demo_session_writes_checkerboard_poses(tmp_path, fake_capture, intrinsics,
                                                     checkerboard_image):
    cfg = SessionConfig(session_name="pose_demo", pose_csv=str(tmp_path / "poses.csv"))
    engine = StrategyFactory.pose_engine(cfg, intrinsics)
    display = HeadlessDisplay()
    board = checkerboard_image()
    session = PoseDemoSession(
        cfg, engine, load_model(cfg),
        capture=fake_capture([board, _blank(), board]),
        display=display,
    )

    summary = session.run()

    assert summary.frames_processed == 3
    rows = _rows(cfg.pose_csv)
    assert [r["frame_idx"] for r in rows] == ["1", "3"]
    assert {(r["target"], r["event"]) for r in rows} == {("checkerboard", "detected")}
    assert float(rows[0]["camera_z"]) < 0
    assert float(rows[0]["tvec_z"]) > 0
    assert session.last_pose is not None
    assert display.last_image is not board


def test_ar_detect_session_locks_and_tracks(tmp_path, fake_capture, intrinsics, rectangle_frame):
    cfg = SessionConfig(session_name="ar_detect", pose_csv=str(tmp_path / "poses.csv"))
    engine = StrategyFactory.pose_engine(cfg, intrinsics)
    target = rectangle_frame((200, 150, 160, 120))
    frames = [_blank(), _blank()] + [target.copy() for _ in range(4)]
    session = ArDetectSession(cfg, engine, load_model(cfg), capture=fake_capture(frames),
                              display=HeadlessDisplay())

    summary = session.run()

    assert summary.frames_processed == 6
    assert session.machine.state is TrackState.TRACKING
    rows = _rows(cfg.pose_csv)
    assert [r["event"] for r in rows] == ["locked", "tracked", "tracked", "tracked"]
    assert [r["good_count"] for r in rows] == ["", "4", "4", "4"]
    assert {r["target"] for r in rows} == {"rectangle"}
    assert [r["frame_idx"] for r in rows] == ["3", "4", "5", "6"]


def test_ar_detect_pose_failure_is_recoverable(fake_capture, intrinsics, rectangle_frame, caplog):
    cfg = SessionConfig(session_name="ar_detect")
    engine = StrategyFactory.pose_engine(cfg, intrinsics)
    engine.localizer = MagicMock()
    engine.localizer.estimate.side_effect = PoseFailure("degenerate")
    target = rectangle_frame((200, 150, 160, 120))
    display = HeadlessDisplay()
    session = ArDetectSession(cfg, engine, load_model(cfg),
                              capture=fake_capture([target, target.copy()]), display=display)

    summary = session.run()

    assert summary.frames_processed == 2
    assert session.last_pose is None
    assert session.last_step.event == "tracked"
    assert "Pose estimation failed" in caplog.text


def test_orb_demo_counts_keypoints(fake_capture, checkerboard_image):
    cfg = SessionConfig(session_name="orb_demo")
    display = HeadlessDisplay()
    session = OrbDemoSession(cfg, capture=fake_capture([checkerboard_image()]), display=display)
    session.run()
    assert session.last_count > 0
    assert display.last_image.shape == checkerboard_image().shape


def test_load_model_defaults_to_lifted_pyramid():
    model = load_model(SessionConfig(model_z_offset=5.0, model_scale=2.0))
    assert model.face_count == 4
    np.testing.assert_allclose(model.vertices[4], [2.0, -2.0, 11.0])


def test_pose_demo_missing_calibration_exits_1(tmp_path):
    assert pose_demo.main(["--calib", str(tmp_path / "missing.yaml"), "--headless"]) == 1


def test_ar_detect_missing_model_exits_1(tmp_path, intrinsics):
    calib = tmp_path / "intrinsics.yaml"
    save_calib(calib, intrinsics)
    argv = ["--calib", str(calib), "--model", str(tmp_path / "missing.obj"), "--headless"]
    assert ar_detect.main(argv) == 1


def test_calibrate_camera_open_failure_exits_1(tmp_path):
    argv = ["--device", str(tmp_path / "missing.avi"), "--headless", "--calib-dir", str(tmp_path)]
    assert calibrate.main(argv) == 1


@pytest.mark.system
def test_pose_demo_replays_image_sequence(tmp_path, intrinsics, checkerboard_image, capsys):
    """Run the pose_demo entrypoint over recorded frames and check the pose log."""
    frames_dir = tmp_path / "frames"
    frames_dir.mkdir()
    for i in range(3):
        cv2.imwrite(str(frames_dir / f"frame_{i:03d}.png"), checkerboard_image())
    calib = tmp_path / "intrinsics.yaml"
    save_calib(calib, intrinsics)
    pose_csv = tmp_path / "poses.csv"

    code = pose_demo.main([
        "--device", str(frames_dir / "frame_%03d.png"),
        "--calib", str(calib),
        "--pose-csv", str(pose_csv),
        "--max-frames", "3",
        "--headless",
    ])

    assert code == 0
    assert "SessionSummary" in capsys.readouterr().out
    assert len(_rows(pose_csv)) == 3
    assert Path(pose_csv).exists()


def test_pose_demo_non_utf8_model_gets_past_loading(tmp_path, intrinsics, caplog):
    model = tmp_path / "latin1.obj"
    model.write_bytes(b"# Caf\xe9\nv 0 0 0\nv 1 0 0\nv 0 1 0\nf 1 2 3\n")
    calib = tmp_path / "intrinsics.yaml"
    save_calib(calib, intrinsics)
    argv = ["--calib", str(calib), "--model", str(model),
            "--device", str(tmp_path / "missing.avi"), "--headless"]

    assert pose_demo.main(argv) == 1
    assert "OBJ loaded: 3 vertices, 1 faces" in caplog.text
    assert "Could not open the camera" in caplog.text
