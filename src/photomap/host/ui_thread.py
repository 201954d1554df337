"""
Presentation-thread marshalling.

Work finished on background threads is posted here and run by whichever
thread drives the presentation, so presentation state is only touched from
that one thread.
"""

import queue
import threading
import time
from collections.abc import Callable
from typing import Any


class UiThread:
    """Queue of callbacks drained by the presentation thread."""

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[tuple[Callable[..., Any], tuple[Any, ...]]] = queue.SimpleQueue()
        self._owner = threading.get_ident()

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        """Schedule a callback; safe to call from any thread."""
        self._queue.put((callback, args))

    def is_current(self) -> bool:
        return threading.get_ident() == self._owner

    def run_pending(self) -> int:
        """Run every callback queued so far. Returns how many ran."""
        ran = 0
        while True:
            try:
                callback, args = self._queue.get_nowait()
            except queue.Empty:
                return ran
            callback(*args)
            ran += 1

    def run_until(self, condition: Callable[[], bool], timeout: float = 30.0) -> bool:
        """
        Run callbacks as they arrive until ``condition()`` holds.

        Returns:
            True if the condition was met, False on timeout
        """
        deadline = time.monotonic() + timeout
        while not condition():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            try:
                callback, args = self._queue.get(timeout=min(remaining, 0.1))
            except queue.Empty:
                continue
            callback(*args)
        return True
