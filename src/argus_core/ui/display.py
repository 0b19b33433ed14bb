"""OpenCV preview window for the live camera feed."""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING

import cv2
import numpy as np

from argus_core.core.config import DisplaySettings
from argus_core.core.logging import get_logger

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = get_logger(__name__)


class KeyAction(Enum):
    """What a key press asks the presentation loop to do."""

    NONE = auto()
    QUIT = auto()
    PAUSE = auto()
    STATS = auto()


KEY_BINDINGS: dict[int, KeyAction] = {
    ord("q"): KeyAction.QUIT,
    ord("Q"): KeyAction.QUIT,
    27: KeyAction.QUIT,  # ESC
    ord(" "): KeyAction.PAUSE,
    ord("s"): KeyAction.STATS,
    ord("S"): KeyAction.STATS,
}


def letterbox(image: NDArray[np.uint8], width: int, height: int) -> NDArray[np.uint8]:
    """Scale an image to fit width x height, padding the rest with black.

    The aspect ratio of the camera image is preserved.
    """
    src_h, src_w = image.shape[:2]
    if (src_w, src_h) == (width, height):
        return image

    scale = min(width / src_w, height / src_h)
    new_w = max(int(round(src_w * scale)), 1)
    new_h = max(int(round(src_h * scale)), 1)
    resized = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)

    canvas = np.zeros((height, width, 3), dtype=np.uint8)
    x = (width - new_w) // 2
    y = (height - new_h) // 2
    canvas[y : y + new_h, x : x + new_w] = resized
    return canvas


class DisplayWindow:
    """Preview window driven by the presentation loop.

    All methods must be called from the presentation thread; HighGUI is not
    thread-safe.
    """

    def __init__(self, settings: DisplaySettings | None = None) -> None:
        """Initialize display window.

        Args:
            settings: Display settings (uses defaults if None)
        """
        self.settings = settings or DisplaySettings()
        self.window_name = self.settings.title
        self._size = (self.settings.width, self.settings.height)
        self._open = False
        self._paused = False

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def is_paused(self) -> bool:
        """Whether preview updates are frozen (inference keeps running)."""
        return self._paused

    def open(self) -> None:
        """Create the window at the configured size."""
        if self._open:
            return
        cv2.namedWindow(self.window_name, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(self.window_name, *self._size)
        self._open = True
        logger.info("Preview window '%s' opened (%dx%d)", self.window_name, *self._size)

    def close(self) -> None:
        """Destroy the window if it is open."""
        if not self._open:
            return
        cv2.destroyWindow(self.window_name)
        self._open = False
        logger.info("Preview window closed")

    def show_frame(self, image: NDArray[np.uint8]) -> None:
        """Letterbox a BGR image to the window size and show it."""
        if not self._open:
            self.open()
        cv2.imshow(self.window_name, letterbox(image, *self._size))

    def blank_frame(self) -> NDArray[np.uint8]:
        """Black image at window size, shown until the camera delivers frames."""
        width, height = self._size
        return np.zeros((height, width, 3), dtype=np.uint8)

    def poll_key(self, wait_ms: int = 1) -> KeyAction:
        """Pump the HighGUI event loop and translate the pressed key.

        Closing the window with the mouse counts as QUIT.

        Args:
            wait_ms: Milliseconds to wait for a key press

        Returns:
            KeyAction for the pressed key, NONE if nothing relevant happened
        """
        key = cv2.waitKey(wait_ms)

        if self._open and self._window_closed():
            self._open = False
            return KeyAction.QUIT

        if key < 0:
            return KeyAction.NONE

        action = KEY_BINDINGS.get(key & 0xFF, KeyAction.NONE)
        if action is KeyAction.PAUSE:
            self._paused = not self._paused
            logger.info("Preview %s", "paused" if self._paused else "resumed")
        return action

    def _window_closed(self) -> bool:
        return cv2.getWindowProperty(self.window_name, cv2.WND_PROP_VISIBLE) < 1

    def __enter__(self) -> DisplayWindow:
        """Context manager entry."""
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()
