"""Cooperative cancellation for a review run.

Provider calls block a worker thread and cannot be interrupted mid-flight, so
cancellation works at the edges of each call: calls not yet started are refused,
every call's timeout is bounded by the time left, and a result that arrives after
cancellation is thrown away.
"""

import threading
import time
from typing import Optional

from contracts import ReviewCancelled


class CancellationToken:
    """Shared by every pass of one review run."""

    def __init__(self, timeout: Optional[float] = None):
        """
        Args:
            timeout: Seconds from now after which the run counts as cancelled.
                     None means no deadline, only explicit cancel().
        """
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def call_timeout(self, default: float) -> float:
        """Timeout for the next provider call: the configured one, capped by the deadline."""
        remaining = self.remaining()
        if remaining is None:
            return default
        return min(default, remaining)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ReviewCancelled("Review cancelled")
        if self.cancelled:
            raise ReviewCancelled("Review deadline exceeded")
