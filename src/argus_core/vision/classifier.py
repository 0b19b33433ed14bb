"""Asynchronous classifier: runs a ClassificationModel on a worker thread.

Architecture:
    caller thread -> ThreadPoolExecutor(N) -> ClassificationModel.classify

``classify`` never blocks the caller for the duration of inference; it returns
a Future and, optionally, invokes a completion callback exactly once with an
``InferenceOutcome``.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING

from argus_core.core.exceptions import ArgusCoreError, InferenceError, ModelLoadError
from argus_core.core.logging import get_logger
from argus_core.core.types import ClassificationResult, Frame, InferenceOutcome

if TYPE_CHECKING:
    from collections.abc import Callable

    from argus_core.vision.model import ClassificationModel

logger = get_logger(__name__)


def outcome_from_future(
    frame_index: int, future: Future[ClassificationResult]
) -> InferenceOutcome:
    """Convert a finished classification future into an InferenceOutcome."""
    if future.cancelled():
        return InferenceOutcome.failure(frame_index, InferenceError("Inference cancelled"))

    error = future.exception()
    if error is None:
        return InferenceOutcome.success(frame_index, future.result())
    if isinstance(error, ArgusCoreError):
        return InferenceOutcome.failure(frame_index, error)
    return InferenceOutcome.failure(frame_index, InferenceError(f"Inference failed: {error}"))


class Classifier:
    """Schedules image classification on a dedicated thread pool.

    The model is loaded lazily before first use. A load failure is cached and
    re-raised for every later call: no classification is possible without a
    model.
    """

    def __init__(self, model: ClassificationModel, num_workers: int = 1) -> None:
        """Initialize classifier.

        Args:
            model: Synchronous classification model backend
            num_workers: Inference worker threads
        """
        self._model = model
        self._executor = ThreadPoolExecutor(
            max_workers=num_workers,
            thread_name_prefix="argus-inference",
        )
        self._init_lock = threading.Lock()
        self._initialized = False
        self._load_error: ModelLoadError | None = None

    @property
    def is_initialized(self) -> bool:
        """Check if the model has been loaded."""
        return self._initialized

    def initialize(self) -> None:
        """Load the model once.

        Raises:
            ModelLoadError: If the model cannot be loaded (now or previously)
        """
        if self._initialized:
            return

        with self._init_lock:
            if self._initialized:
                return
            if self._load_error is not None:
                # Fresh instance per caller; the cached one stays the cause
                raise ModelLoadError(self._load_error.message) from self._load_error

            try:
                self._model.load()
            except ModelLoadError as e:
                self._load_error = e
                raise
            except Exception as e:
                self._load_error = ModelLoadError(f"Failed to load model: {e}")
                raise self._load_error from e

            self._initialized = True
            logger.info("Classification model ready")

    def classify(
        self,
        frame: Frame,
        completion: Callable[[InferenceOutcome], None] | None = None,
    ) -> Future[ClassificationResult]:
        """Schedule classification of a frame.

        Args:
            frame: Frame to classify
            completion: Called exactly once with the outcome, on the thread
                that finishes the future

        Returns:
            Future resolving to the ranked classifications

        Raises:
            RuntimeError: If the classifier has been closed
        """
        future = self._executor.submit(self._run, frame)

        if completion is not None:
            frame_index = frame.index
            future.add_done_callback(
                lambda done: completion(outcome_from_future(frame_index, done))
            )

        return future

    def close(self) -> None:
        """Stop the worker pool and release the model."""
        self._executor.shutdown(wait=True, cancel_futures=True)
        self._model.close()
        self._initialized = False
        logger.info("Classifier closed")

    def _run(self, frame: Frame) -> ClassificationResult:
        self.initialize()
        try:
            return self._model.classify(frame)
        except ArgusCoreError:
            raise
        except Exception as e:
            raise InferenceError(f"Classification failed: {e}") from e

    def __enter__(self) -> Classifier:
        """Context manager entry."""
        self.initialize()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()
