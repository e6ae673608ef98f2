"""Deadline-bound cancellation tokens for steps and batches."""

from __future__ import annotations

import threading
import time

from pairbatch.core.errors import OperationCancelledError

_POLL_SECONDS = 0.25


class CancellationToken:
    """Cancellation signal with an optional deadline.

    Child tokens are cancelled when their parent is, and never outlive the
    parent's deadline.
    """

    def __init__(
        self,
        timeout: float | None = None,
        parent: CancellationToken | None = None,
    ) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._parent = parent
        self._reason: str | None = None

    def child(self, timeout: float | None = None) -> CancellationToken:
        """Derive a token that also expires after ``timeout`` seconds."""
        return CancellationToken(timeout=timeout, parent=self)

    def cancel(self, reason: str = "cancelled") -> None:
        """Cancel this token and every token derived from it."""
        if self._reason is None:
            self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def reason(self) -> str | None:
        """Why the token was cancelled, or None while it is live."""
        if self._event.is_set():
            return self._reason
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return "deadline exceeded"
        if self._parent is not None:
            return self._parent.reason
        return None

    def remaining(self) -> float | None:
        """Seconds until the nearest deadline, or None when unbounded."""
        candidates: list[float] = []
        if self._deadline is not None:
            candidates.append(max(0.0, self._deadline - time.monotonic()))
        if self._parent is not None:
            parent_remaining = self._parent.remaining()
            if parent_remaining is not None:
                candidates.append(parent_remaining)
        return min(candidates) if candidates else None

    def bound(self, timeout: float) -> float:
        """Clamp ``timeout`` to the time this token has left."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return min(timeout, remaining)

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelledError if the token is cancelled."""
        if self.cancelled:
            raise OperationCancelledError(self.reason or "cancelled")

    def sleep(self, seconds: float) -> None:
        """Sleep up to ``seconds``, raising early if the token is cancelled."""
        end = time.monotonic() + seconds
        while True:
            self.raise_if_cancelled()
            left = end - time.monotonic()
            if left <= 0:
                return
            self._event.wait(min(left, _POLL_SECONDS))
