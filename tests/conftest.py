"""Pytest fixtures for ArgusCore tests."""

from __future__ import annotations

import threading
from concurrent.futures import Future

import numpy as np
import pytest

from argus_core.core.config import ClassifierSettings, DisplaySettings
from argus_core.core.exceptions import ModelLoadError
from argus_core.core.types import (
    Classification,
    ClassificationResult,
    DisplaySummary,
    Frame,
    Orientation,
)
from argus_core.ui.dispatch import PresentationQueue
from argus_core.vision.classifier import outcome_from_future


def make_frame(index: int = 0, image: np.ndarray | None = None) -> Frame:
    """Create a frame with a small black image unless one is given."""
    if image is None:
        image = np.zeros((48, 64, 3), dtype=np.uint8)
    return Frame(image=image, timestamp=index / 30.0, index=index, orientation=Orientation.UP)


def ranked(*pairs: tuple[str, float]) -> ClassificationResult:
    """Build a ClassificationResult from (label, confidence) pairs."""
    return [Classification(label=label, confidence=confidence) for label, confidence in pairs]


class ManualClassifier:
    """Classifier double whose futures are resolved by the test."""

    def __init__(self) -> None:
        self.frames: list[Frame] = []
        self.futures: list[Future[ClassificationResult]] = []
        self.closed = False

    def classify(self, frame: Frame, completion=None) -> Future[ClassificationResult]:
        future: Future[ClassificationResult] = Future()
        if completion is not None:
            index = frame.index
            future.add_done_callback(lambda done: completion(outcome_from_future(index, done)))
        self.frames.append(frame)
        self.futures.append(future)
        return future

    def resolve(self, call: int, result: ClassificationResult) -> None:
        self.futures[call].set_result(result)

    def fail(self, call: int, error: BaseException) -> None:
        self.futures[call].set_exception(error)

    def close(self) -> None:
        self.closed = True


class FakeModel:
    """ClassificationModel double with optional blocking and failures."""

    def __init__(
        self,
        result: ClassificationResult | None = None,
        load_error: Exception | None = None,
        classify_error: Exception | None = None,
    ) -> None:
        self.result = result if result is not None else ranked(("cat, feline", 0.9))
        self.load_error = load_error
        self.classify_error = classify_error
        self.gate = threading.Event()
        self.gate.set()
        self.load_calls = 0
        self.classify_calls = 0
        self.thread_names: list[str] = []
        self.closed = False
        self._lock = threading.Lock()

    def load(self) -> None:
        self.load_calls += 1
        if self.load_error is not None:
            raise self.load_error

    def classify(self, frame: Frame) -> ClassificationResult:
        with self._lock:
            self.classify_calls += 1
            self.thread_names.append(threading.current_thread().name)
        self.gate.wait(timeout=5.0)
        if self.classify_error is not None:
            raise self.classify_error
        return list(self.result)

    def close(self) -> None:
        self.closed = True


class RecordingPresenter:
    """Presenter that records summaries and the thread they arrived on."""

    def __init__(self) -> None:
        self.summaries: list[DisplaySummary] = []
        self.thread_ids: list[int] = []

    def present(self, summary: DisplaySummary) -> None:
        self.summaries.append(summary)
        self.thread_ids.append(threading.get_ident())

    @property
    def texts(self) -> list[str]:
        return [s.text for s in self.summaries]


@pytest.fixture
def sample_frame() -> Frame:
    """Create a sample valid frame."""
    return make_frame(0)


@pytest.fixture
def manual_classifier() -> ManualClassifier:
    return ManualClassifier()


@pytest.fixture
def fake_model() -> FakeModel:
    return FakeModel()


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def dispatcher() -> PresentationQueue:
    return PresentationQueue()


@pytest.fixture
def cat_dog_bird() -> ClassificationResult:
    """Ranked output with comma-separated synonym labels."""
    return ranked(("cat, feline", 0.962), ("dog, canine", 0.031), ("bird", 0.007))


@pytest.fixture
def model_load_error() -> ModelLoadError:
    return ModelLoadError("weights missing")


@pytest.fixture
def display_settings() -> DisplaySettings:
    """Create display settings for testing."""
    return DisplaySettings(width=640, height=480)


@pytest.fixture
def classifier_settings(tmp_path) -> ClassifierSettings:
    """Create classifier settings pointing at a temporary model directory."""
    return ClassifierSettings(weights_dir=str(tmp_path / "models"))
