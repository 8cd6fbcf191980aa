"""
Trailing-edge debouncing for selection changes.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional, Tuple


class Debouncer:
    """Calls ``func`` once ``wait`` seconds after the last call.

    Only the arguments of the last call are used. With ``wait <= 0`` every
    call goes straight through, which keeps tests free of timing.
    """

    def __init__(self, func: Callable[..., None], wait: float):
        self._func = func
        self._wait = wait
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._args: Tuple[Any, ...] = ()
        self._lock = threading.Lock()

    @property
    def wait(self) -> float:
        return self._wait

    @property
    def pending(self) -> bool:
        """Whether a call is scheduled."""
        return self._timer is not None

    def __call__(self, *args: Any) -> None:
        if self._wait <= 0:
            self._func(*args)
            return

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._args = args
            self._timer = threading.Timer(self._wait, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, generation: int) -> None:
        # A timer that already started cannot be cancelled; stale ones bail out here
        with self._lock:
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
            args = self._args
        self._func(*args)

    def cancel(self) -> None:
        """Drop the scheduled call, if any."""
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush(self) -> None:
        """Run the scheduled call now."""
        with self._lock:
            if self._timer is None:
                return
            self._generation += 1
            self._timer.cancel()
            self._timer = None
            args = self._args
        self._func(*args)
