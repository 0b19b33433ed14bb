"""Tests for the asynchronous Classifier."""

from __future__ import annotations

import threading
from concurrent.futures import Future

import pytest

from argus_core.core.exceptions import InferenceError, ModelLoadError
from argus_core.core.types import ClassificationResult, InferenceOutcome
from argus_core.vision.classifier import Classifier, outcome_from_future
from conftest import FakeModel, make_frame, ranked


class TestClassifier:
    """Tests for the Classifier class."""

    def test_classify_returns_future_with_results(self, fake_model: FakeModel) -> None:
        with Classifier(fake_model) as classifier:
            future = classifier.classify(make_frame(0))

            assert future.result(timeout=5.0) == ranked(("cat, feline", 0.9))

    def test_completion_called_exactly_once(self, fake_model: FakeModel) -> None:
        outcomes: list[InferenceOutcome] = []
        done = threading.Event()

        def completion(outcome: InferenceOutcome) -> None:
            outcomes.append(outcome)
            done.set()

        with Classifier(fake_model) as classifier:
            classifier.classify(make_frame(7), completion).result(timeout=5.0)
            assert done.wait(timeout=5.0)

        assert len(outcomes) == 1
        assert outcomes[0].ok
        assert outcomes[0].frame_index == 7
        assert outcomes[0].classifications[0].label == "cat, feline"

    def test_runs_on_inference_thread(self, fake_model: FakeModel) -> None:
        with Classifier(fake_model) as classifier:
            classifier.classify(make_frame(0)).result(timeout=5.0)

        assert fake_model.thread_names[0].startswith("argus-inference")
        assert fake_model.thread_names[0] != threading.current_thread().name

    def test_classify_does_not_block_caller(self, fake_model: FakeModel) -> None:
        fake_model.gate.clear()
        classifier = Classifier(fake_model)
        try:
            future = classifier.classify(make_frame(0))
            assert not future.done()
        finally:
            fake_model.gate.set()
            classifier.close()

        assert future.result(timeout=5.0)

    def test_model_error_becomes_inference_error(self) -> None:
        model = FakeModel(classify_error=ValueError("bad tensor"))

        with Classifier(model) as classifier:
            future = classifier.classify(make_frame(0))

            with pytest.raises(InferenceError, match="bad tensor"):
                future.result(timeout=5.0)

    def test_reentrant_calls_each_complete(self, fake_model: FakeModel) -> None:
        """Rapid submissions interleaved with completions each finish once."""
        with Classifier(fake_model, num_workers=2) as classifier:
            futures = [classifier.classify(make_frame(i)) for i in range(10)]
            results = [f.result(timeout=5.0) for f in futures]

        assert len(results) == 10
        assert fake_model.classify_calls == 10

    def test_model_loaded_lazily_once(self, fake_model: FakeModel) -> None:
        classifier = Classifier(fake_model)
        assert not classifier.is_initialized
        assert fake_model.load_calls == 0

        try:
            for i in range(3):
                classifier.classify(make_frame(i)).result(timeout=5.0)
        finally:
            classifier.close()

        assert fake_model.load_calls == 1

    def test_load_failure_is_fatal_and_cached(self) -> None:
        model = FakeModel(load_error=FileNotFoundError("efficientnet_lite0.tflite"))
        classifier = Classifier(model)

        try:
            with pytest.raises(ModelLoadError, match="efficientnet_lite0"):
                classifier.initialize()
            with pytest.raises(ModelLoadError):
                classifier.classify(make_frame(0)).result(timeout=5.0)
        finally:
            classifier.close()

        assert model.load_calls == 1
        assert model.classify_calls == 0

    def test_repeated_load_failure_raises_fresh_error(
        self, model_load_error: ModelLoadError
    ) -> None:
        """Each caller gets its own exception, chained to the cached failure."""
        classifier = Classifier(FakeModel(load_error=model_load_error))

        try:
            with pytest.raises(ModelLoadError) as first:
                classifier.initialize()
            with pytest.raises(ModelLoadError) as second:
                classifier.initialize()
        finally:
            classifier.close()

        assert first.value is model_load_error
        assert second.value is not model_load_error
        assert second.value.__cause__ is model_load_error
        assert second.value.message == "weights missing"

    def test_load_failure_reaches_completion(self, model_load_error: ModelLoadError) -> None:
        model = FakeModel(load_error=model_load_error)
        outcomes: list[InferenceOutcome] = []

        classifier = Classifier(model)
        try:
            future = classifier.classify(make_frame(0), outcomes.append)
            with pytest.raises(ModelLoadError):
                future.result(timeout=5.0)
        finally:
            classifier.close()

        assert len(outcomes) == 1
        assert outcomes[0].error is model_load_error

    def test_close_releases_model_and_rejects_new_work(self, fake_model: FakeModel) -> None:
        classifier = Classifier(fake_model)
        classifier.close()

        assert fake_model.closed
        with pytest.raises(RuntimeError):
            classifier.classify(make_frame(0))


class TestOutcomeFromFuture:
    """Tests for converting futures into outcomes."""

    def test_success(self) -> None:
        future: Future[ClassificationResult] = Future()
        future.set_result(ranked(("dog", 0.5)))

        outcome = outcome_from_future(3, future)

        assert outcome.ok
        assert outcome.frame_index == 3

    def test_cancelled(self) -> None:
        future: Future[ClassificationResult] = Future()
        future.cancel()

        outcome = outcome_from_future(0, future)

        assert isinstance(outcome.error, InferenceError)

    def test_foreign_exception_is_wrapped(self) -> None:
        future: Future[ClassificationResult] = Future()
        future.set_exception(KeyError("logits"))

        outcome = outcome_from_future(0, future)

        assert isinstance(outcome.error, InferenceError)
        assert "logits" in str(outcome.error)
