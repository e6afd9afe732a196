"""Cooperative cancellation primitives (public API facade).

``CancellationToken`` signals early termination to streaming consumers;
``CancelledError`` is raised by operations that observe the request.
"""
from .cancellation_parts.cancellation_token import CancellationToken
from .cancellation_parts.cancelled_error import CancelledError

__all__ = ["CancellationToken", "CancelledError"]
