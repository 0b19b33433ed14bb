"""Cross-thread handoff onto the presentation thread."""

from __future__ import annotations

import queue
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class PresentationQueue:
    """Callbacks posted from any thread, run by the thread that drains them.

    The presentation loop calls ``drain`` once per tick; nothing posted here
    ever runs on the posting thread.
    """

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[Callable[[], None]] = queue.SimpleQueue()
        self._owner: int | None = None

    @property
    def pending(self) -> int:
        """Approximate number of callbacks waiting to run."""
        return self._queue.qsize()

    def post(self, callback: Callable[[], None]) -> None:
        """Schedule a callback for the presentation thread. Never blocks."""
        self._queue.put(callback)

    def drain(self, max_items: int | None = None) -> int:
        """Run pending callbacks on the calling thread.

        The first thread to drain becomes the owner; draining from any other
        thread afterwards is a programming error.

        Args:
            max_items: Stop after this many callbacks (all pending if None)

        Returns:
            Number of callbacks run
        """
        current = threading.get_ident()
        if self._owner is None:
            self._owner = current
        elif self._owner != current:
            raise RuntimeError("PresentationQueue drained from a non-owner thread")

        ran = 0
        while max_items is None or ran < max_items:
            try:
                callback = self._queue.get_nowait()
            except queue.Empty:
                break
            callback()
            ran += 1

        return ran
