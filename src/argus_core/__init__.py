"""ArgusCore: live camera frames classified by a pretrained image model."""

__version__ = "0.1.0"
