"""
Normalized error codes (taxonomy).

Values are lowercase snake_case and are a stable contract for logging and for
the ``error`` field exposed by the conversation store.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated failure categories for the conversation layer."""

    TRANSPORT = "transport"
    MALFORMED_FRAME = "malformed_frame"
    SYNTHESIS = "synthesis"
    PERSISTENCE = "persistence"
    AUTH = "auth"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMIT = "rate_limit"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
