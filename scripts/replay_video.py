#!/usr/bin/env python3
"""Replay a recorded video through the classification pipeline.

Frames are pushed at the video's native frame rate (or as fast as possible
with --no-pacing) so the admission/drop behavior matches a live camera.
Every presented summary and the final pipeline statistics are logged.
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import cv2
import numpy as np

from argus_core.core.config import get_settings
from argus_core.core.exceptions import ArgusCoreError
from argus_core.core.logging import get_logger, setup_logging
from argus_core.core.types import DisplaySummary, Frame, Orientation
from argus_core.main import build_pipeline, log_stats
from argus_core.ui.dispatch import PresentationQueue

logger = get_logger(__name__)


class LoggingPresenter:
    """Presenter that writes each summary to the log."""

    def __init__(self) -> None:
        self.count = 0

    def present(self, summary: DisplaySummary) -> None:
        self.count += 1
        logger.info("[%d] %s", self.count, summary.text.replace("\n", " | "))


def replay(video_path: Path, orientation: Orientation, pacing: bool) -> int:
    """Push every frame of a video into a fresh pipeline.

    Returns:
        Exit code
    """
    settings = get_settings()

    cap = cv2.VideoCapture(str(video_path))
    if not cap.isOpened():
        logger.error("Could not open video: %s", video_path)
        return 1

    fps = cap.get(cv2.CAP_PROP_FPS)
    interval = 1.0 / fps if pacing and fps > 0 else 0.0

    dispatcher = PresentationQueue()
    presenter = LoggingPresenter()
    pipeline, classifier = build_pipeline(settings, presenter, dispatcher)

    try:
        classifier.initialize()
        logger.info("Replaying %s (%.1f fps, pacing=%s)", video_path, fps, pacing)

        start = time.monotonic()
        frame_idx = 0
        while True:
            ok, image = cap.read()
            if not ok:
                break

            frame = Frame(
                image=np.asarray(image, dtype=np.uint8),
                timestamp=time.monotonic() - start,
                index=frame_idx,
                orientation=orientation,
            )
            pipeline.on_frame(frame)
            frame_idx += 1

            dispatcher.drain()

            if interval > 0:
                next_due = start + frame_idx * interval
                time.sleep(max(0.0, next_due - time.monotonic()))

        # Every admitted frame yields exactly one summary
        admitted = pipeline.stats().frames_admitted
        deadline = time.monotonic() + 10.0
        while presenter.count < admitted and time.monotonic() < deadline:
            dispatcher.drain()
            time.sleep(0.01)

        log_stats(pipeline.stats())
        return 0

    except ArgusCoreError as e:
        logger.error("Replay failed: %s", e)
        return 2

    finally:
        cap.release()
        pipeline.close()


def main() -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Replay a video through the pipeline")
    parser.add_argument("video", type=Path, help="Path to video file")
    parser.add_argument(
        "--orientation",
        choices=[o.name.lower() for o in Orientation],
        default="up",
        help="Orientation of the recorded frames",
    )
    parser.add_argument(
        "--no-pacing",
        action="store_true",
        help="Push frames as fast as they decode instead of at native fps",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    setup_logging("DEBUG" if args.debug else "INFO")

    if not args.video.exists():
        logger.error("Video not found: %s", args.video)
        return 1

    return replay(args.video, Orientation.from_name(args.orientation), pacing=not args.no_pacing)


if __name__ == "__main__":
    sys.exit(main())
