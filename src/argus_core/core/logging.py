"""Logging setup shared by the application and scripts.

All loggers live under the ``argus_core`` namespace. The thread name is part
of every record since capture, inference and presentation run on different
threads.
"""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

NAMESPACE = "argus_core"

# Inference backends that log chattily at INFO
BACKEND_LOGGERS = ("mediapipe", "absl")

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    backend_level: str = "WARNING",
) -> None:
    """Configure the ``argus_core`` logger tree.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a log file, parent directories are created
        backend_level: Level applied to inference backend loggers
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    app_logger = logging.getLogger(NAMESPACE)
    app_logger.setLevel(log_level)
    app_logger.handlers.clear()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        app_logger.addHandler(handler)

    quiet = getattr(logging, backend_level.upper(), logging.WARNING)
    for name in BACKEND_LOGGERS:
        logging.getLogger(name).setLevel(quiet)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module, placed under the ``argus_core`` namespace.

    Args:
        name: Module name (typically __name__)
    """
    if not name.startswith(NAMESPACE):
        name = f"{NAMESPACE}.{name}"
    return logging.getLogger(name)


@contextmanager
def log_timing(logger: logging.Logger, label: str) -> Iterator[None]:
    """Log how long the wrapped block took, at INFO, when it succeeds."""
    start = time.perf_counter()
    yield
    logger.info("%s took %.0f ms", label, (time.perf_counter() - start) * 1000.0)
