from __future__ import annotations

import threading
import time


class CancelToken:
    """Cancellation handle shared between a caller and one or more request executions.

    A token can be cancelled explicitly from any thread and may carry an absolute
    deadline. Child tokens derived with :meth:`with_timeout` are cancelled when either
    their own deadline passes or the parent is cancelled.
    """

    def __init__(self, timeout_s: float | None = None, *, parent: CancelToken | None = None) -> None:
        self._event = threading.Event()
        self._parent = parent
        self._deadline = time.monotonic() + max(0.0, timeout_s) if timeout_s is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._parent is not None and self._parent.cancelled:
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the nearest deadline, or ``None`` if there is none."""
        candidates = []
        if self._deadline is not None:
            candidates.append(max(0.0, self._deadline - time.monotonic()))
        if self._parent is not None:
            parent_remaining = self._parent.remaining()
            if parent_remaining is not None:
                candidates.append(parent_remaining)
        return min(candidates) if candidates else None

    def with_timeout(self, timeout_s: float) -> CancelToken:
        return CancelToken(timeout_s, parent=self)

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return True if the token was cancelled meanwhile."""
        end = time.monotonic() + max(0.0, seconds)
        while not self.cancelled:
            left = end - time.monotonic()
            if left <= 0:
                return False
            remaining = self.remaining()
            step = left if remaining is None else min(left, remaining)
            # parents are polled, so wake up periodically to observe them
            if self._parent is not None:
                step = min(step, 0.05)
            self._event.wait(max(step, 0.0))
        return True
