"""Live video capture."""

from argus_core.camera.stream import CameraStream

__all__ = ["CameraStream"]
