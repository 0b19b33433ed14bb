"""Tests for the presentation queue."""

from __future__ import annotations

import threading

import pytest

from argus_core.ui.dispatch import PresentationQueue


class TestPresentationQueue:
    """Tests for the PresentationQueue class."""

    def test_post_does_not_run_callback(self, dispatcher: PresentationQueue) -> None:
        calls: list[int] = []

        dispatcher.post(lambda: calls.append(1))

        assert calls == []
        assert dispatcher.pending == 1

    def test_drain_runs_in_post_order(self, dispatcher: PresentationQueue) -> None:
        calls: list[int] = []
        for i in range(3):
            dispatcher.post(lambda i=i: calls.append(i))

        assert dispatcher.drain() == 3
        assert calls == [0, 1, 2]
        assert dispatcher.pending == 0

    def test_drain_respects_max_items(self, dispatcher: PresentationQueue) -> None:
        calls: list[int] = []
        for i in range(5):
            dispatcher.post(lambda i=i: calls.append(i))

        assert dispatcher.drain(max_items=2) == 2
        assert calls == [0, 1]
        assert dispatcher.drain() == 3

    def test_callbacks_posted_elsewhere_run_on_drainer(
        self, dispatcher: PresentationQueue
    ) -> None:
        ran_on: list[int] = []

        poster = threading.Thread(
            target=dispatcher.post,
            args=(lambda: ran_on.append(threading.get_ident()),),
        )
        poster.start()
        poster.join()

        dispatcher.drain()

        assert ran_on == [threading.get_ident()]

    def test_drain_from_second_thread_is_rejected(self, dispatcher: PresentationQueue) -> None:
        dispatcher.drain()
        errors: list[BaseException] = []

        def drain_elsewhere() -> None:
            try:
                dispatcher.drain()
            except RuntimeError as e:
                errors.append(e)

        other = threading.Thread(target=drain_elsewhere)
        other.start()
        other.join()

        assert len(errors) == 1

    def test_empty_drain(self, dispatcher: PresentationQueue) -> None:
        assert dispatcher.drain() == 0

    def test_callback_error_propagates_to_drainer(self, dispatcher: PresentationQueue) -> None:
        def broken() -> None:
            raise ValueError("render failed")

        dispatcher.post(broken)

        with pytest.raises(ValueError):
            dispatcher.drain()
