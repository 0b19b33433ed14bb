"""Tests for core data types."""

from __future__ import annotations

import numpy as np
import pytest

from argus_core.core.exceptions import InferenceError
from argus_core.core.types import (
    DisplaySummary,
    Frame,
    InferenceOutcome,
    Orientation,
    SummaryKind,
)
from conftest import ranked


class TestOrientation:
    """Tests for the Orientation enum."""

    @pytest.mark.parametrize(
        ("name", "degrees"),
        [("up", 0), ("RIGHT", 90), ("Down", 180), ("left", 270)],
    )
    def test_from_name(self, name: str, degrees: int) -> None:
        assert Orientation.from_name(name).rotation_degrees == degrees

    def test_unknown_name(self) -> None:
        with pytest.raises(KeyError):
            Orientation.from_name("sideways")


class TestFrame:
    """Tests for the Frame dataclass."""

    def test_dimensions(self, sample_frame: Frame) -> None:
        assert sample_frame.dimensions == (64, 48)
        assert sample_frame.is_valid

    def test_missing_image_is_invalid(self) -> None:
        frame = Frame(image=None, timestamp=0.0, index=0)

        assert not frame.is_valid
        assert frame.dimensions == (0, 0)

    def test_empty_image_is_invalid(self) -> None:
        frame = Frame(image=np.zeros((0, 0, 3), dtype=np.uint8), timestamp=0.0, index=0)

        assert not frame.is_valid

    def test_frozen(self, sample_frame: Frame) -> None:
        with pytest.raises(AttributeError):
            sample_frame.index = 3  # type: ignore[misc]


class TestInferenceOutcome:
    """Tests for the InferenceOutcome dataclass."""

    def test_success_freezes_classifications(self) -> None:
        result = ranked(("cat", 0.8))
        outcome = InferenceOutcome.success(4, result)
        result.clear()

        assert outcome.ok
        assert outcome.frame_index == 4
        assert len(outcome.classifications) == 1

    def test_failure(self) -> None:
        outcome = InferenceOutcome.failure(2, InferenceError("timeout"))

        assert not outcome.ok
        assert outcome.classifications == ()


class TestDisplaySummary:
    def test_text_joins_lines(self) -> None:
        summary = DisplaySummary(lines=("Cat: 97%", "Dog: 3%"))

        assert summary.text == "Cat: 97%\nDog: 3%"
        assert not summary.is_error

    def test_error_kind(self) -> None:
        summary = DisplaySummary(lines=("Unable to classify.",), kind=SummaryKind.ERROR)

        assert summary.is_error
