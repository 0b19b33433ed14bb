"""Frame-to-inference pipeline with admission control.

Data flow:
    FrameSource -> on_frame (admission) -> Classifier (async) -> on_result
        -> ResultFormatter -> Dispatcher.post -> Presenter (presentation thread)

At most one classification is in flight at any time. Frames arriving while
one is outstanding are dropped, so the pipeline never falls behind a live
feed and results arrive in admission order.
"""

from __future__ import annotations

import functools
import threading
import time
from typing import TYPE_CHECKING, Protocol

from argus_core.core.exceptions import InferenceError, ModelLoadError
from argus_core.core.logging import get_logger
from argus_core.core.types import DisplaySummary, Frame, InferenceOutcome
from argus_core.pipeline.admission import InFlightFlag
from argus_core.pipeline.formatter import ResultFormatter
from argus_core.pipeline.stats import PipelineStats, StatsSnapshot

if TYPE_CHECKING:
    from collections.abc import Callable
    from concurrent.futures import Future

    from argus_core.core.types import ClassificationResult

logger = get_logger(__name__)


class FrameClassifier(Protocol):
    """Asynchronous classifier as seen by the pipeline.

    ``classify`` calls ``completion`` at most once per frame. If it raises,
    the pipeline reports a submission failure unless ``completion`` already
    ran.
    """

    def classify(
        self,
        frame: Frame,
        completion: Callable[[InferenceOutcome], None] | None = None,
    ) -> Future[ClassificationResult]: ...

    def close(self) -> None: ...


class Presenter(Protocol):
    """Consumer of display summaries. Only called on the presentation thread."""

    def present(self, summary: DisplaySummary) -> None: ...


class Dispatcher(Protocol):
    """Hands a callback over to the presentation thread."""

    def post(self, callback: Callable[[], None]) -> None: ...


class _OneShotCompletion:
    """Forwards the first outcome for an admitted frame; later calls are ignored."""

    def __init__(
        self,
        on_result: Callable[..., None],
        started_at: float,
    ) -> None:
        self._on_result = on_result
        self._started_at = started_at
        self._lock = threading.Lock()
        self._fired = False

    def __call__(self, outcome: InferenceOutcome) -> None:
        with self._lock:
            if self._fired:
                logger.debug("Ignoring repeated outcome for frame %d", outcome.frame_index)
                return
            self._fired = True
        self._on_result(outcome, started_at=self._started_at)


class InferencePipeline:
    """Gates frames into the classifier and routes results to the presenter.

    ``on_frame`` runs on the producer thread and never blocks on inference.
    ``on_result`` runs on whichever thread completes the classification and
    never touches the presenter directly; delivery is posted through the
    dispatcher.
    """

    def __init__(
        self,
        classifier: FrameClassifier,
        presenter: Presenter,
        dispatcher: Dispatcher,
        formatter: ResultFormatter | None = None,
    ) -> None:
        """Initialize pipeline.

        Args:
            classifier: Asynchronous classifier
            presenter: Receives one DisplaySummary per completed inference
            dispatcher: Marshals presenter calls onto the presentation thread
            formatter: Result formatter (top-2 if None)
        """
        self._classifier = classifier
        self._presenter = presenter
        self._dispatcher = dispatcher
        self._formatter = formatter or ResultFormatter()

        self._in_flight = InFlightFlag()
        self._stats = PipelineStats()
        self._fatal_error: ModelLoadError | None = None

    @property
    def is_busy(self) -> bool:
        """Whether a classification is currently in flight."""
        return self._in_flight.is_set

    @property
    def fatal_error(self) -> ModelLoadError | None:
        """Model load failure that disabled the pipeline, if any."""
        return self._fatal_error

    @property
    def is_disabled(self) -> bool:
        """Whether classification has been disabled by a fatal error."""
        return self._fatal_error is not None

    def stats(self) -> StatsSnapshot:
        """Get a snapshot of pipeline counters."""
        return self._stats.snapshot()

    def on_frame(self, frame: Frame) -> bool:
        """Offer a frame to the classifier. Called on the producer thread.

        Args:
            frame: Newly captured frame

        Returns:
            True if the frame was admitted for classification
        """
        self._stats.record_received()

        if self._fatal_error is not None or not frame.is_valid:
            self._stats.record_rejected()
            return False

        if not self._in_flight.try_acquire():
            self._stats.record_dropped()
            return False

        self._stats.record_admitted()
        completion = _OneShotCompletion(self.on_result, started_at=time.perf_counter())

        try:
            self._classifier.classify(frame, completion)
        except Exception as e:
            logger.error("Could not submit frame %d: %s", frame.index, e)
            # No-op if the classifier already reported an outcome before raising
            completion(
                InferenceOutcome.failure(
                    frame.index, InferenceError(f"Could not submit frame: {e}")
                )
            )

        return True

    def on_result(self, outcome: InferenceOutcome, started_at: float | None = None) -> None:
        """Handle a finished classification. Called on the completion thread.

        Args:
            outcome: Classifications or the error for one frame
            started_at: perf_counter value at admission, for latency tracking
        """
        # Latch before freeing the slot so no frame is admitted past a fatal error
        if isinstance(outcome.error, ModelLoadError):
            self._fatal_error = outcome.error
        self._in_flight.release()

        latency_ms = None
        if started_at is not None:
            latency_ms = (time.perf_counter() - started_at) * 1000.0
        self._stats.record_result(outcome.ok, latency_ms)

        if isinstance(outcome.error, ModelLoadError):
            logger.critical("Classification disabled: %s", outcome.error)
        elif outcome.error is not None:
            logger.warning("Inference failed for frame %d: %s", outcome.frame_index, outcome.error)
        else:
            logger.debug(
                "Frame %d classified (%d labels)",
                outcome.frame_index,
                len(outcome.classifications),
            )

        summary = self._formatter.format_outcome(outcome)
        self._dispatcher.post(functools.partial(self._presenter.present, summary))

    def close(self) -> None:
        """Shut down the classifier."""
        self._classifier.close()
        logger.info("Inference pipeline closed")

    def __enter__(self) -> InferencePipeline:
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()
