from abc import ABC, abstractmethod
from typing import Optional

import cv2
import numpy as np

ESC = 27


class Display(ABC):
    @abstractmethod
    def open(self) -> None: ...

    @abstractmethod
    def show(self, image: np.ndarray) -> None: ...

    @abstractmethod
    def poll(self, wait_ms: int) -> Optional[int]:
        """Key code pressed during the wait, or None."""

    @abstractmethod
    def close(self) -> None: ...


class WindowDisplay(Display):
    def __init__(self, name: str):
        self.name = name
        self._open = False

    def open(self) -> None:
        cv2.namedWindow(self.name, cv2.WINDOW_AUTOSIZE)
        self._open = True

    def show(self, image: np.ndarray) -> None:
        cv2.imshow(self.name, image)

    def poll(self, wait_ms: int) -> Optional[int]:
        key = cv2.waitKey(max(1, wait_ms))
        if key < 0:
            return None
        return key & 0xFF

    def close(self) -> None:
        if self._open:
            cv2.destroyWindow(self.name)
            self._open = False


class HeadlessDisplay(Display):
    """No window and no key input; keeps the last frame for inspection."""

    def __init__(self):
        self.last_image: Optional[np.ndarray] = None
        self.shown = 0

    def open(self) -> None:
        return None

    def show(self, image: np.ndarray) -> None:
        self.last_image = image
        self.shown += 1

    def poll(self, wait_ms: int) -> Optional[int]:
        return None

    def close(self) -> None:
        return None
