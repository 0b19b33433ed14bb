"""Application configuration via Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CameraSettings(BaseSettings):
    """Live video source settings."""

    model_config = SettingsConfigDict(env_prefix="CAMERA_")

    # Device index ("0") or a video file / stream URL
    source: str = "0"
    width: int | None = None
    height: int | None = None
    orientation: Literal["up", "right", "down", "left"] = "up"
    intrinsics: list[list[float]] | None = None
    read_retry_limit: int = Field(default=30, ge=1)


class ClassifierSettings(BaseSettings):
    """Image classification model settings."""

    model_config = SettingsConfigDict(env_prefix="CLASSIFIER_")

    weights_file: str = "efficientnet_lite0.tflite"
    weights_url: str = (
        "https://storage.googleapis.com/mediapipe-models/image_classifier/"
        "efficientnet_lite0/float32/latest/efficientnet_lite0.tflite"
    )
    weights_dir: str = "data/models"
    max_results: int = Field(default=5, ge=1)
    score_threshold: float = Field(default=0.0, ge=0.0, le=1.0)
    center_crop: bool = True
    num_workers: int = Field(default=1, ge=1)


class DisplaySettings(BaseSettings):
    """Display window and overlay settings."""

    model_config = SettingsConfigDict(env_prefix="DISPLAY_")

    title: str = "ArgusCore"
    width: int = 1280
    height: int = 720
    top_k: int = Field(default=2, ge=1)
    waiting_text: str = "Waiting for camera..."


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"
    file: str | None = None


class Settings(BaseSettings):
    """Root settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    camera: CameraSettings = Field(default_factory=CameraSettings)
    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings instance."""
    return Settings()
