"""Core data types and structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

import numpy as np
from numpy.typing import NDArray

from argus_core.core.exceptions import ArgusCoreError


class Orientation(Enum):
    """Where the top of the captured image points, relative to upright.

    The value is the clockwise rotation (degrees) that makes the image upright.
    """

    UP = 0
    RIGHT = 90
    DOWN = 180
    LEFT = 270

    @classmethod
    def from_name(cls, name: str) -> Orientation:
        """Look up an orientation by case-insensitive name."""
        return cls[name.upper()]

    @property
    def rotation_degrees(self) -> int:
        """Clockwise rotation needed to make the image upright."""
        return self.value


@dataclass(frozen=True, slots=True)
class Frame:
    """A captured video frame with metadata.

    Attributes:
        image: BGR image array (OpenCV format), None if the capture carried no data
        timestamp: Capture timestamp in seconds since stream start
        index: Frame sequence number
        orientation: Orientation of the image content
        intrinsics: Optional 3x3 camera intrinsic matrix
    """

    image: NDArray[np.uint8] | None
    timestamp: float
    index: int
    orientation: Orientation = Orientation.UP
    intrinsics: NDArray[np.float64] | None = None

    @property
    def is_valid(self) -> bool:
        """Whether the frame carries a usable image buffer."""
        return self.image is not None and self.image.size > 0

    @property
    def width(self) -> int:
        """Frame width in pixels (0 without image data)."""
        return int(self.image.shape[1]) if self.is_valid else 0

    @property
    def height(self) -> int:
        """Frame height in pixels (0 without image data)."""
        return int(self.image.shape[0]) if self.is_valid else 0

    @property
    def dimensions(self) -> tuple[int, int]:
        """Frame dimensions as (width, height)."""
        return self.width, self.height


@dataclass(frozen=True, slots=True)
class Classification:
    """A single (label, confidence) prediction.

    Labels may be comma-separated synonym lists, e.g. "tabby, tabby cat".
    """

    label: str
    confidence: float


# Ordered by descending confidence, possibly empty.
ClassificationResult = list[Classification]


@dataclass(frozen=True, slots=True)
class InferenceOutcome:
    """Result of classifying one frame: either classifications or an error."""

    frame_index: int
    classifications: tuple[Classification, ...] = ()
    error: ArgusCoreError | None = None

    @classmethod
    def success(
        cls, frame_index: int, classifications: ClassificationResult
    ) -> InferenceOutcome:
        return cls(frame_index=frame_index, classifications=tuple(classifications))

    @classmethod
    def failure(cls, frame_index: int, error: ArgusCoreError) -> InferenceOutcome:
        return cls(frame_index=frame_index, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None


class SummaryKind(Enum):
    """What a display summary describes."""

    RESULTS = auto()
    NOTHING = auto()
    ERROR = auto()


@dataclass(frozen=True, slots=True)
class DisplaySummary:
    """Display-ready lines derived from one inference outcome."""

    lines: tuple[str, ...]
    kind: SummaryKind = SummaryKind.RESULTS

    @property
    def text(self) -> str:
        """Lines joined with line breaks."""
        return "\n".join(self.lines)

    @property
    def is_error(self) -> bool:
        return self.kind is SummaryKind.ERROR
