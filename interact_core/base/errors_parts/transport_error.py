"""Transport failure raised when a backend call or live stream breaks."""
from __future__ import annotations

from typing import Any

from .error_code import ErrorCode
from .interact_error import InteractError


class TransportError(InteractError):
    """Network or stream failure; the decoder yields nothing further."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("component", "backend")
        kwargs.setdefault("retryable", True)
        super().__init__(ErrorCode.TRANSPORT, message, **kwargs)


__all__ = ["TransportError"]
