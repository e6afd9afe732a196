"""
Structured error type for the conversation layer.

Wraps lower-level failures (httpx, sqlite, template engine) with a normalized
:class:`ErrorCode` so callers can branch on the category and the store can
surface a readable message.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class InteractError(Exception):
    """Structured error with a normalized code.

    Attributes:
        code: Normalized :class:`ErrorCode` for the failure.
        message: Human-readable message, suitable for the UI error field.
        component: Originating component (``"store"``, ``"backend"`` ...).
        conversation_id: Conversation involved, when known.
        retryable: Hint for callers; not authoritative.
        raw: Original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    component: str = "interact"
    conversation_id: Optional[str] = None
    retryable: bool = False
    raw: Optional[BaseException] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.component} {self.code.value}: {self.message}"


__all__ = ["InteractError"]
