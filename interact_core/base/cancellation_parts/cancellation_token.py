"""Cooperative cancellation token.

Used by the incremental decoder and the store's streamed replies: once the
token is cancelled, decoders stop yielding, even if buffered lines remain.
"""

from __future__ import annotations

from threading import Lock

from .cancelled_error import CancelledError
from .state import State


class CancellationToken:
    """Set-once cancellation flag shared between a caller and a stream consumer.

    ``cancel`` may be called from another thread (a CLI signal handler);
    the consumer polls ``cancelled`` or calls ``raise_if_cancelled``.
    """

    def __init__(self) -> None:
        self._state = State()
        self._lock = Lock()

    @property
    def cancelled(self) -> bool:
        return self._state.cancelled

    @property
    def reason(self) -> str | None:
        return self._state.reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation; idempotent (the first reason wins)."""
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason

    def raise_if_cancelled(self) -> None:
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled")

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self._state.cancelled}, reason={self._state.reason!r})"


__all__ = ["CancellationToken"]
