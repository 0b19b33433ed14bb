"""Main entry point for ArgusCore live classification."""

from __future__ import annotations

import os
import sys

from argus_core.camera.stream import CameraStream
from argus_core.core.config import Settings, get_settings
from argus_core.core.exceptions import ArgusCoreError, ModelLoadError, VideoStreamError
from argus_core.core.logging import get_logger, setup_logging
from argus_core.pipeline.formatter import ResultFormatter
from argus_core.pipeline.inference import Dispatcher, InferencePipeline, Presenter
from argus_core.pipeline.stats import StatsSnapshot
from argus_core.ui.dispatch import PresentationQueue
from argus_core.ui.display import DisplayWindow, KeyAction
from argus_core.ui.overlay import OverlayPresenter
from argus_core.vision.classifier import Classifier
from argus_core.vision.model import MediaPipeImageClassifier

logger = get_logger(__name__)


def build_pipeline(
    settings: Settings,
    presenter: Presenter,
    dispatcher: Dispatcher,
) -> tuple[InferencePipeline, Classifier]:
    """Construct the classifier and the pipeline that owns it.

    Returns:
        Tuple of (pipeline, classifier)
    """
    model = MediaPipeImageClassifier(settings.classifier)
    classifier = Classifier(model, num_workers=settings.classifier.num_workers)
    pipeline = InferencePipeline(
        classifier,
        presenter,
        dispatcher,
        formatter=ResultFormatter(top_k=settings.display.top_k),
    )
    return pipeline, classifier


def log_stats(stats: StatsSnapshot) -> None:
    """Log a one-line pipeline summary."""
    latency = f"{stats.mean_latency_ms:.1f} ms" if stats.mean_latency_ms is not None else "n/a"
    logger.info(
        "Frames: %d received, %d admitted, %d dropped (%.0f%%), %d rejected | "
        "inferences: %d ok, %d failed | latency: %s",
        stats.frames_received,
        stats.frames_admitted,
        stats.frames_dropped,
        stats.drop_rate * 100,
        stats.frames_rejected,
        stats.inferences_completed,
        stats.inferences_failed,
        latency,
    )


def run_live_session(settings: Settings | None = None) -> int:
    """Run live classification on the configured camera.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    settings = settings or get_settings()
    setup_logging(settings.logging.level, settings.logging.file)

    logger.info("Starting ArgusCore")

    dispatcher = PresentationQueue()
    presenter = OverlayPresenter(settings.display)
    display = DisplayWindow(settings.display)
    pipeline, classifier = build_pipeline(settings, presenter, dispatcher)
    stream = CameraStream(settings.camera, sink=pipeline.on_frame)

    try:
        # Load weights up front: without a model there is nothing to run
        classifier.initialize()

        display.open()
        stream.start()

        logger.info("Starting classification loop (press 'q' to quit)")

        while True:
            # Deliver finished results on this (the presentation) thread
            dispatcher.drain()

            if pipeline.fatal_error is not None:
                raise pipeline.fatal_error
            if stream.error is not None:
                raise stream.error
            if not stream.is_running:
                logger.info("Video source ended")
                break

            if not display.is_paused:
                frame = stream.latest_frame
                image = frame.image if frame is not None and frame.is_valid else None
                if image is None:
                    image = display.blank_frame()
                display.show_frame(presenter.render(image))

            action = display.poll_key(wait_ms=15)

            if action == KeyAction.QUIT:
                logger.info("Quit requested")
                break

            elif action == KeyAction.STATS:
                log_stats(pipeline.stats())

        log_stats(pipeline.stats())
        return 0

    except ModelLoadError as e:
        logger.critical("Model could not be loaded: %s", e)
        return 1

    except VideoStreamError as e:
        logger.error("Video stream failed: %s", e)
        return 2

    except ArgusCoreError as e:
        logger.error("Classification error: %s", e)
        return 2

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        return 3

    finally:
        stream.stop()
        pipeline.close()
        display.close()
        logger.info("ArgusCore stopped")


def main() -> None:
    """CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="ArgusCore - Live image classification from a camera feed"
    )
    parser.add_argument(
        "--source",
        help="Camera index or video file/URL (overrides CAMERA_SOURCE)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    if args.source is not None:
        os.environ["CAMERA_SOURCE"] = args.source
    if args.debug:
        os.environ["LOG_LEVEL"] = "DEBUG"

    sys.exit(run_live_session())


if __name__ == "__main__":
    main()
