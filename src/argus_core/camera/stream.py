"""Live video source pushing frames from its own capture thread."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Any

import cv2
import numpy as np

from argus_core.core.config import CameraSettings
from argus_core.core.exceptions import VideoStreamError
from argus_core.core.logging import get_logger
from argus_core.core.types import Frame, Orientation

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger(__name__)


def _parse_source(source: str) -> int | str:
    """Device indices are given as digits, anything else is a path or URL."""
    return int(source) if source.isdigit() else source


class CameraStream:
    """Reads frames on a background thread and pushes each one to a sink.

    The sink is called on the capture thread, once per frame, and must return
    quickly. The most recent frame is also kept for preview rendering.
    """

    def __init__(
        self,
        settings: CameraSettings | None = None,
        sink: Callable[[Frame], Any] | None = None,
        capture_factory: Callable[..., Any] = cv2.VideoCapture,
    ) -> None:
        """Initialize stream.

        Args:
            settings: Camera settings (uses defaults if None)
            sink: Receives every captured frame on the capture thread
            capture_factory: Builds the capture object (cv2.VideoCapture by default)
        """
        self.settings = settings or CameraSettings()
        self._sink = sink
        self._capture_factory = capture_factory
        self._orientation = Orientation.from_name(self.settings.orientation)
        self._intrinsics = (
            np.asarray(self.settings.intrinsics, dtype=np.float64)
            if self.settings.intrinsics is not None
            else None
        )

        self._cap: Any | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._latest: Frame | None = None
        self._frame_idx = 0
        self._start_time: float | None = None
        self._running = False
        self._error: VideoStreamError | None = None

    @property
    def is_running(self) -> bool:
        """Check if the capture thread is active."""
        return self._running

    @property
    def frame_count(self) -> int:
        """Number of frames captured so far."""
        return self._frame_idx

    @property
    def error(self) -> VideoStreamError | None:
        """Error that stopped the capture thread, if any."""
        return self._error

    @property
    def latest_frame(self) -> Frame | None:
        """Most recently captured frame."""
        with self._lock:
            return self._latest

    def set_sink(self, sink: Callable[[Frame], Any] | None) -> None:
        """Replace the frame sink."""
        self._sink = sink

    def start(self) -> None:
        """Open the video source and start the capture thread.

        Raises:
            VideoStreamError: If the source cannot be opened
        """
        if self._running:
            return

        source = _parse_source(self.settings.source)
        try:
            cap = self._capture_factory(source)
        except Exception as e:
            raise VideoStreamError(f"Failed to open video source {source!r}: {e}") from e

        if not cap.isOpened():
            cap.release()
            raise VideoStreamError(f"Could not open video source {source!r}")

        if self.settings.width is not None:
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.settings.width)
        if self.settings.height is not None:
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.settings.height)

        self._cap = cap
        self._frame_idx = 0
        self._error = None
        self._start_time = time.monotonic()
        self._running = True
        self._thread = threading.Thread(
            target=self._capture_loop,
            name="argus-capture",
            daemon=True,
        )
        self._thread.start()
        logger.info("Video stream started (source=%r)", source)

    def stop(self, timeout: float = 2.0) -> None:
        """Stop the capture thread and release the source."""
        self._running = False
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._thread = None

        if self._cap is not None:
            self._cap.release()
            self._cap = None
        logger.info("Video stream stopped (captured %d frames)", self._frame_idx)

    def join(self, timeout: float | None = None) -> None:
        """Wait for the capture thread to finish (e.g. end of a video file)."""
        if self._thread is not None:
            self._thread.join(timeout)

    def _capture_loop(self) -> None:
        failures = 0
        try:
            while self._running and self._cap is not None:
                ok, image = self._cap.read()
                if not ok or image is None:
                    failures += 1
                    if failures >= self.settings.read_retry_limit:
                        logger.info("Video source exhausted after %d frames", self._frame_idx)
                        break
                    time.sleep(0.01)
                    continue

                failures = 0
                frame = self._make_frame(image)
                with self._lock:
                    self._latest = frame
                if self._sink is not None:
                    self._sink(frame)

        except Exception as e:
            logger.error("Frame capture error: %s", e)
            self._error = VideoStreamError(f"Frame capture failed: {e}")

        finally:
            self._running = False

    def _make_frame(self, image: Any) -> Frame:
        timestamp = time.monotonic() - (self._start_time or time.monotonic())
        frame = Frame(
            image=np.asarray(image, dtype=np.uint8),
            timestamp=timestamp,
            index=self._frame_idx,
            orientation=self._orientation,
            intrinsics=self._intrinsics,
        )
        self._frame_idx += 1
        return frame

    def __enter__(self) -> CameraStream:
        """Context manager entry."""
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.stop()
