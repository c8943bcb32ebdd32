from pathlib import Path
import json, cv2

from ..errors import IoFailure


class CalibrationStorage:
    """Calibration output directory: intrinsics file, images, session manifest."""

    def __init__(self, root: str, intrinsics_name: str = "intrinsics.yaml"):
        self.root = Path(root)
        self.intrinsics_name = intrinsics_name
        self.saved_images: list[str] = []

    @property
    def intrinsics_path(self) -> Path:
        return self.root / self.intrinsics_name

    def begin(self) -> str:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IoFailure(f"Could not create calibration directory {self.root}") from exc
        return str(self.root)

    def save_images(self, images) -> list[str]:
        """Write ``calibration_image_<i>.png`` for every image, in capture order."""
        self.begin()
        paths = []
        for i, image in enumerate(images):
            p = self.root / f"calibration_image_{i}.png"
            if not cv2.imwrite(str(p), image):
                raise IoFailure(f"Could not write {p}")
            paths.append(str(p))
        self.saved_images = paths
        return paths

    def write_manifest(self, meta: dict, name: str = "calibration_session.json"):
        self.begin()
        with open(self.root / name, "w") as fp:
            json.dump(meta, fp, indent=2, default=str)
