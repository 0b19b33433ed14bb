"""Core infrastructure: config, types, exceptions, and logging."""

from argus_core.core.config import Settings, get_settings
from argus_core.core.exceptions import (
    ArgusCoreError,
    InferenceError,
    ModelLoadError,
    VideoStreamError,
)
from argus_core.core.logging import get_logger, setup_logging
from argus_core.core.types import (
    Classification,
    ClassificationResult,
    DisplaySummary,
    Frame,
    InferenceOutcome,
    Orientation,
    SummaryKind,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Types
    "Frame",
    "Orientation",
    "Classification",
    "ClassificationResult",
    "InferenceOutcome",
    "DisplaySummary",
    "SummaryKind",
    # Exceptions
    "ArgusCoreError",
    "ModelLoadError",
    "InferenceError",
    "VideoStreamError",
    # Logging
    "setup_logging",
    "get_logger",
]
