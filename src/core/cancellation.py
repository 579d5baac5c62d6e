# src/core/cancellation.py — v1
"""Call context carrying a cancellation flag and an optional deadline.

Passed down from every caller-facing operation to the inference adapter.
Cancellation is cooperative: work already dispatched stops only at the
next check point (between streamed chunks, before the next task).
"""

from __future__ import annotations

import threading
import time

from agentweave.core.errors import TaskCancelledError


class CallContext:
    """Cancellation signal plus monotonic deadline."""

    def __init__(self, deadline: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> CallContext:
        """Context whose deadline is `seconds` from now."""
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def cancel(self) -> None:
        self._event.set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, None when unbounded."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def check(self, task_id: str | None = None) -> None:
        """Raise TaskCancelledError if cancelled or past the deadline."""
        if self._event.is_set():
            raise TaskCancelledError("call cancelled", task_id=task_id)
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise TaskCancelledError("call deadline exceeded", task_id=task_id)


def background() -> CallContext:
    """Fresh context that is never cancelled and has no deadline."""
    return CallContext()
