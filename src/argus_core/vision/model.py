"""Image classification model backends.

Backends wrap a trained model behind the small ``ClassificationModel``
protocol so MediaPipe objects do not leak into the rest of the codebase.
"""

from __future__ import annotations

import threading
import urllib.request
from pathlib import Path
from typing import Any, Protocol

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision
from mediapipe.tasks.python.components.containers.rect import RectF
from mediapipe.tasks.python.vision.core.image_processing_options import (
    ImageProcessingOptions,
)

from argus_core.core.config import ClassifierSettings
from argus_core.core.exceptions import InferenceError, ModelLoadError
from argus_core.core.logging import get_logger, log_timing
from argus_core.core.types import Classification, ClassificationResult, Frame

logger = get_logger(__name__)


class ClassificationModel(Protocol):
    """Protocol for synchronous image classification models."""

    def load(self) -> None:
        """Load model weights. Raises ModelLoadError on failure."""
        ...

    def classify(self, frame: Frame) -> ClassificationResult:
        """Classify a frame and return predictions sorted by confidence (descending)."""
        ...

    def close(self) -> None:
        """Release model resources."""
        ...


def _download_model(settings: ClassifierSettings) -> Path:
    """Download the classifier model if not present.

    Returns:
        Path to the model file

    Raises:
        ModelLoadError: If download fails
    """
    weights_dir = Path(settings.weights_dir)
    model_path = weights_dir / settings.weights_file
    if model_path.exists():
        return model_path

    logger.info("Downloading image classifier model from %s", settings.weights_url)
    weights_dir.mkdir(parents=True, exist_ok=True)

    try:
        urllib.request.urlretrieve(settings.weights_url, model_path)
        logger.info("Model downloaded to %s", model_path)
        return model_path
    except Exception as e:
        raise ModelLoadError(f"Failed to download model: {e}") from e


def center_crop_region(width: int, height: int) -> tuple[float, float, float, float]:
    """Normalized (left, top, right, bottom) of the centered square crop."""
    side = min(width, height)
    left = (width - side) / 2 / width
    top = (height - side) / 2 / height
    return left, top, 1.0 - left, 1.0 - top


def score_to_float(score: float | None) -> float:
    """Python float with the shortest decimal that round-trips the float32 score.

    The backend computes scores in float32, where 0.285 is stored as
    0.28499999642...; going through the float32 repr yields 0.285 again.
    """
    return float(str(np.float32(score or 0.0)))


def convert_categories(result: Any) -> ClassificationResult:
    """Convert a MediaPipe ImageClassifierResult to Classification objects.

    Only the first classification head is used.
    """
    if not result.classifications:
        return []

    categories = result.classifications[0].categories or []
    converted = [
        Classification(
            label=category.display_name or category.category_name or "",
            confidence=score_to_float(category.score),
        )
        for category in categories
    ]
    converted.sort(key=lambda c: c.confidence, reverse=True)
    return converted


class MediaPipeImageClassifier:
    """Wrapper for the MediaPipe Tasks ImageClassifier.

    Applies the frame orientation as a rotation and, optionally, a centered
    square crop before classification.
    """

    def __init__(self, settings: ClassifierSettings | None = None) -> None:
        """Initialize classifier wrapper with settings.

        Args:
            settings: Classifier settings (uses defaults if None)
        """
        self.settings = settings or ClassifierSettings()
        self._classifier: vision.ImageClassifier | None = None
        # The task graph is not safe for concurrent calls
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        """Check if the MediaPipe model is loaded."""
        return self._classifier is not None

    def load(self) -> None:
        """Load the MediaPipe image classifier.

        Raises:
            ModelLoadError: If the model cannot be downloaded or created
        """
        try:
            model_path = _download_model(self.settings)

            base_options = python.BaseOptions(model_asset_path=str(model_path))
            options = vision.ImageClassifierOptions(
                base_options=base_options,
                running_mode=vision.RunningMode.IMAGE,
                max_results=self.settings.max_results,
                score_threshold=self.settings.score_threshold,
            )

            with self._lock, log_timing(logger, "Image classifier creation"):
                self._classifier = vision.ImageClassifier.create_from_options(options)
            logger.info("MediaPipe ImageClassifier initialized (%s)", model_path.name)

        except ModelLoadError:
            raise
        except Exception as e:
            raise ModelLoadError(f"Failed to initialize MediaPipe classifier: {e}") from e

    def close(self) -> None:
        """Release MediaPipe resources."""
        with self._lock:
            if self._classifier is not None:
                self._classifier.close()
                self._classifier = None

    def classify(self, frame: Frame) -> ClassificationResult:
        """Run classification on a frame.

        Raises:
            InferenceError: If the model is not loaded or classification fails
        """
        if self._classifier is None:
            raise InferenceError("Image classifier not loaded")
        if not frame.is_valid:
            raise InferenceError("Frame has no image data")

        try:
            rgb_image = cv2.cvtColor(frame.image, cv2.COLOR_BGR2RGB)
            mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_image)
            options = self._processing_options(frame)

            with self._lock:
                result = self._classifier.classify(mp_image, options)

        except Exception as e:
            logger.error("Classification failed on frame %d: %s", frame.index, e)
            raise InferenceError(f"Classification failed: {e}") from e

        return convert_categories(result)

    def _processing_options(self, frame: Frame) -> ImageProcessingOptions:
        region = None
        if self.settings.center_crop:
            left, top, right, bottom = center_crop_region(frame.width, frame.height)
            region = RectF(left=left, top=top, right=right, bottom=bottom)

        return ImageProcessingOptions(
            region_of_interest=region,
            rotation_degrees=frame.orientation.rotation_degrees,
        )

    def __enter__(self) -> MediaPipeImageClassifier:
        """Context manager entry."""
        self.load()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()
