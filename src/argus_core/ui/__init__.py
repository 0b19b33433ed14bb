"""Presentation: dispatch onto the UI thread, overlay, and preview window."""

from argus_core.ui.dispatch import PresentationQueue
from argus_core.ui.display import DisplayWindow, KeyAction
from argus_core.ui.overlay import OverlayPresenter

__all__ = ["PresentationQueue", "OverlayPresenter", "DisplayWindow", "KeyAction"]
