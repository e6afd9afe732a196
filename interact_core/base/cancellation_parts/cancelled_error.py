"""Cancellation error type.

Kept apart from generic runtime failures so a cancelled stream can be told
apart from a broken one (no error state, no retry).
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation observes a cooperative cancellation request."""


__all__ = ["CancelledError"]
