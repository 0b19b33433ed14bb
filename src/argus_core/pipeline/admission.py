"""Admission control state shared between the frame and completion threads."""

from __future__ import annotations

import threading


class InFlightFlag:
    """Mutex-guarded "inference in flight" flag.

    ``try_acquire`` is a single check-and-set step, so two frames racing on
    different threads can never both be admitted.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_flight = False

    @property
    def is_set(self) -> bool:
        """Whether an inference is currently outstanding."""
        with self._lock:
            return self._in_flight

    def try_acquire(self) -> bool:
        """Set the flag if it is clear.

        Returns:
            True if the caller now owns the in-flight slot
        """
        with self._lock:
            if self._in_flight:
                return False
            self._in_flight = True
            return True

    def release(self) -> None:
        """Clear the flag. Safe to call from any thread, and when already clear."""
        with self._lock:
            self._in_flight = False
