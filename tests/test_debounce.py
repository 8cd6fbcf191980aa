"""
Tests for the trailing-edge debouncer.

Run with: pytest tests/test_debounce.py -v
"""
import threading

from flet_pdf_highlighter.interactions.debounce import Debouncer


class TestDebouncer:
    """Tests for delayed calls."""

    def test_zero_wait_calls_immediately(self):
        calls = []
        debounced = Debouncer(calls.append, 0)
        debounced(1)
        debounced(2)
        assert calls == [1, 2]
        assert not debounced.pending

    def test_only_last_call_fires(self):
        calls = []
        fired = threading.Event()

        def record(value):
            calls.append(value)
            fired.set()

        debounced = Debouncer(record, 0.05)
        debounced(1)
        debounced(2)
        debounced(3)
        assert fired.wait(2.0)
        assert calls == [3]

    def test_cancel(self):
        calls = []
        debounced = Debouncer(calls.append, 10)
        debounced(1)
        assert debounced.pending
        debounced.cancel()
        assert not debounced.pending
        debounced.flush()
        assert calls == []

    def test_flush_runs_now(self):
        calls = []
        debounced = Debouncer(calls.append, 10)
        debounced("a")
        debounced("b")
        debounced.flush()
        assert calls == ["b"]
        assert not debounced.pending

    def test_late_timer_after_cancel_does_nothing(self):
        """A timer that started before cancel() must not call through."""
        calls = []
        debounced = Debouncer(calls.append, 10)
        debounced(1)
        started = debounced._generation
        debounced.cancel()
        debounced._fire(started)
        assert calls == []

    def test_late_timer_does_not_steal_newer_call(self):
        calls = []
        debounced = Debouncer(calls.append, 10)
        debounced(1)
        started = debounced._generation
        debounced(2)
        debounced._fire(started)

        assert calls == []
        assert debounced.pending
        debounced.flush()
        assert calls == [2]
