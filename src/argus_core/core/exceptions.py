"""Custom exceptions for ArgusCore."""


class ArgusCoreError(Exception):
    """Base exception for all ArgusCore errors."""

    pass


class ModelLoadError(ArgusCoreError):
    """The classification model could not be loaded.

    Fatal: no classification is possible without a model.
    """

    def __init__(self, message: str = "Failed to load classification model") -> None:
        self.message = message
        super().__init__(self.message)


class InferenceError(ArgusCoreError):
    """A single classification call failed."""

    def __init__(self, message: str = "Inference failed") -> None:
        self.message = message
        super().__init__(self.message)


class VideoStreamError(ArgusCoreError):
    """Error with video stream capture."""

    def __init__(self, message: str = "Video stream error") -> None:
        self.message = message
        super().__init__(self.message)
