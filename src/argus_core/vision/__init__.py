"""Image classification: async classifier and model backends."""

from argus_core.vision.classifier import Classifier, outcome_from_future
from argus_core.vision.model import ClassificationModel, MediaPipeImageClassifier

__all__ = [
    "Classifier",
    "ClassificationModel",
    "MediaPipeImageClassifier",
    "outcome_from_future",
]
