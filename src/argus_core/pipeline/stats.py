"""Pipeline counters and inference latency tracking.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass


class RollingAverage:
    """Rolling average over the last N values."""

    def __init__(self, maxlen: int = 30) -> None:
        self._values: deque[float] = deque(maxlen=maxlen)

    def add(self, value: float) -> None:
        self._values.append(value)

    @property
    def average(self) -> float | None:
        if not self._values:
            return None
        return sum(self._values) / len(self._values)

    @property
    def count(self) -> int:
        return len(self._values)

    def clear(self) -> None:
        self._values.clear()


@dataclass(frozen=True, slots=True)
class StatsSnapshot:
    """Point-in-time copy of pipeline counters.

    Attributes:
        frames_received: Every frame pushed into the pipeline
        frames_admitted: Frames submitted to the classifier
        frames_dropped: Frames discarded while an inference was in flight
        frames_rejected: Malformed frames or frames arriving after a fatal error
        inferences_completed: Successful classifications
        inferences_failed: Failed classifications
        mean_latency_ms: Rolling mean from admission to result, None before the first result
    """

    frames_received: int = 0
    frames_admitted: int = 0
    frames_dropped: int = 0
    frames_rejected: int = 0
    inferences_completed: int = 0
    inferences_failed: int = 0
    mean_latency_ms: float | None = None

    @property
    def drop_rate(self) -> float:
        """Fraction of received frames dropped for backpressure."""
        if self.frames_received == 0:
            return 0.0
        return self.frames_dropped / self.frames_received


class PipelineStats:
    """Thread-safe counters updated from the frame and completion threads."""

    def __init__(self, latency_window: int = 30) -> None:
        self._lock = threading.Lock()
        self._received = 0
        self._admitted = 0
        self._dropped = 0
        self._rejected = 0
        self._completed = 0
        self._failed = 0
        self._latency_ms = RollingAverage(maxlen=latency_window)

    def record_received(self) -> None:
        with self._lock:
            self._received += 1

    def record_admitted(self) -> None:
        with self._lock:
            self._admitted += 1

    def record_dropped(self) -> None:
        with self._lock:
            self._dropped += 1

    def record_rejected(self) -> None:
        with self._lock:
            self._rejected += 1

    def record_result(self, ok: bool, latency_ms: float | None = None) -> None:
        with self._lock:
            if ok:
                self._completed += 1
            else:
                self._failed += 1
            if latency_ms is not None:
                self._latency_ms.add(latency_ms)

    def snapshot(self) -> StatsSnapshot:
        """Return an immutable copy of the current counters."""
        with self._lock:
            return StatsSnapshot(
                frames_received=self._received,
                frames_admitted=self._admitted,
                frames_dropped=self._dropped,
                frames_rejected=self._rejected,
                inferences_completed=self._completed,
                inferences_failed=self._failed,
                mean_latency_ms=self._latency_ms.average,
            )

    def reset(self) -> None:
        """Zero all counters."""
        with self._lock:
            self._received = 0
            self._admitted = 0
            self._dropped = 0
            self._rejected = 0
            self._completed = 0
            self._failed = 0
            self._latency_ms.clear()
