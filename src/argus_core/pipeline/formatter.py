"""Formatting of ranked classifications into display-ready summaries.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from argus_core.core.types import (
    Classification,
    DisplaySummary,
    InferenceOutcome,
    SummaryKind,
)

NOTHING_RECOGNIZED = "Nothing recognized."
UNABLE_TO_CLASSIFY = "Unable to classify."
DEFAULT_TOP_K = 2


def clean_label(label: str) -> str:
    """Keep only the first name of a comma-separated synonym list."""
    return label.split(",", 1)[0].strip()


def to_percent(confidence: float) -> int:
    """Convert a [0, 1] confidence to a whole percentage, rounding half up.

    Rounds the shortest decimal repr of the Python float, so 0.285 gives 29.
    Float32 model scores must be narrowed first (see
    ``argus_core.vision.model.score_to_float``), otherwise 0.285 arrives as
    0.28499999642... and gives 28.
    """
    scaled = Decimal(str(float(confidence))) * 100
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


class ResultFormatter:
    """Turns a ClassificationResult into a bounded DisplaySummary.

    Input is assumed to be ordered by descending confidence already and is
    never re-sorted or validated.
    """

    def __init__(self, top_k: int = DEFAULT_TOP_K) -> None:
        """Initialize formatter.

        Args:
            top_k: Maximum number of entries shown
        """
        if top_k < 1:
            raise ValueError(f"top_k must be at least 1, got {top_k}")
        self.top_k = top_k

    def format(self, classifications: Sequence[Classification]) -> DisplaySummary:
        """Format the top entries as "<label>: <percent>%" lines."""
        if not classifications:
            return DisplaySummary(lines=(NOTHING_RECOGNIZED,), kind=SummaryKind.NOTHING)

        lines = tuple(
            f"{clean_label(entry.label)}: {to_percent(entry.confidence)}%"
            for entry in classifications[: self.top_k]
        )
        return DisplaySummary(lines=lines, kind=SummaryKind.RESULTS)

    def format_error(self, error: BaseException) -> DisplaySummary:
        """Format a classification failure as a user-visible message."""
        reason = str(error) or "Error"
        return DisplaySummary(lines=(UNABLE_TO_CLASSIFY, reason), kind=SummaryKind.ERROR)

    def format_outcome(self, outcome: InferenceOutcome) -> DisplaySummary:
        """Format either side of an inference outcome."""
        if outcome.error is not None:
            return self.format_error(outcome.error)
        return self.format(outcome.classifications)
