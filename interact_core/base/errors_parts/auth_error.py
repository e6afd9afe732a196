"""Authentication failure (HTTP 401); credentials have already been cleared."""
from __future__ import annotations

from typing import Any

from .error_code import ErrorCode
from .interact_error import InteractError


class AuthError(InteractError):
    """Signals that re-authentication is required."""

    def __init__(self, message: str = "authentication required", **kwargs: Any) -> None:
        kwargs.setdefault("component", "backend")
        super().__init__(ErrorCode.AUTH, message, **kwargs)


__all__ = ["AuthError"]
