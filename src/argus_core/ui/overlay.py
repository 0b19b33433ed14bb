"""Overlay presenter: title and latest classification summary on the preview."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import cv2
import numpy as np

from argus_core.core.config import DisplaySettings
from argus_core.core.logging import get_logger
from argus_core.core.types import DisplaySummary, SummaryKind

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = get_logger(__name__)


@dataclass
class OverlayLayout:
    """Layout configuration for overlay elements."""

    margin: int = 20
    padding: int = 12
    line_gap: int = 10

    title_scale: float = 1.4
    title_thickness: int = 3
    result_scale: float = 1.0
    result_thickness: int = 2

    # Colors (BGR)
    color_text: tuple[int, int, int] = (255, 255, 255)
    color_shadow: tuple[int, int, int] = (0, 0, 0)
    color_error: tuple[int, int, int] = (80, 80, 255)
    box_alpha: float = 0.5


class OverlayPresenter:
    """Holds the latest DisplaySummary and draws it over camera frames.

    ``present`` replaces the previous summary. Both ``present`` and ``render``
    must be called on the presentation thread.
    """

    def __init__(
        self,
        settings: DisplaySettings | None = None,
        layout: OverlayLayout | None = None,
    ) -> None:
        """Initialize presenter.

        Args:
            settings: Display settings
            layout: Overlay layout configuration
        """
        self.settings = settings or DisplaySettings()
        self.layout = layout or OverlayLayout()
        self._summary = DisplaySummary(lines=(self.settings.waiting_text,), kind=SummaryKind.NOTHING)
        self._updates = 0

    @property
    def summary(self) -> DisplaySummary:
        """Summary currently shown."""
        return self._summary

    @property
    def update_count(self) -> int:
        """Number of summaries presented so far."""
        return self._updates

    def present(self, summary: DisplaySummary) -> None:
        """Replace the shown summary."""
        self._summary = summary
        self._updates += 1
        if summary.is_error:
            logger.debug("Presenting error: %s", summary.text.replace("\n", " "))

    def render(self, image: NDArray[np.uint8]) -> NDArray[np.uint8]:
        """Draw title and current summary on a copy of the image.

        Args:
            image: BGR camera frame

        Returns:
            Image with overlay
        """
        result = image.copy()
        self._draw_title(result)
        self._draw_summary(result)
        return result

    def _draw_title(self, image: NDArray[np.uint8]) -> None:
        font = cv2.FONT_HERSHEY_SIMPLEX
        scale = self.layout.title_scale
        thickness = self.layout.title_thickness
        title = self.settings.title

        (text_w, text_h), _ = cv2.getTextSize(title, font, scale, thickness)
        x = (image.shape[1] - text_w) // 2
        y = self.layout.margin + text_h

        # Drop shadow keeps the title readable over a live feed
        cv2.putText(image, title, (x + 2, y + 2), font, scale, self.layout.color_shadow, thickness)
        cv2.putText(image, title, (x, y), font, scale, self.layout.color_text, thickness)

    def _draw_summary(self, image: NDArray[np.uint8]) -> None:
        font = cv2.FONT_HERSHEY_SIMPLEX
        scale = self.layout.result_scale
        thickness = self.layout.result_thickness
        lines = self._summary.lines or ("",)

        sizes = [cv2.getTextSize(line, font, scale, thickness)[0] for line in lines]
        line_h = max(h for _, h in sizes)
        box_w = max(w for w, _ in sizes) + 2 * self.layout.padding
        box_h = len(lines) * line_h + (len(lines) - 1) * self.layout.line_gap
        box_h += 2 * self.layout.padding

        height, width = image.shape[:2]
        x0 = max((width - box_w) // 2, 0)
        y0 = max(height - self.layout.margin - box_h, 0)
        x1 = min(x0 + box_w, width)
        y1 = min(y0 + box_h, height)

        # Semi-transparent background box
        region = image[y0:y1, x0:x1]
        shade = np.zeros_like(region)
        image[y0:y1, x0:x1] = cv2.addWeighted(
            region, 1.0 - self.layout.box_alpha, shade, self.layout.box_alpha, 0
        )

        color = self.layout.color_error if self._summary.is_error else self.layout.color_text
        for i, (line, (line_w, _)) in enumerate(zip(lines, sizes)):
            x = (width - line_w) // 2
            y = y0 + self.layout.padding + line_h + i * (line_h + self.layout.line_gap)
            cv2.putText(image, line, (x, y), font, scale, color, thickness)
