"""Durable key-value store read/write failure."""
from __future__ import annotations

from typing import Any

from .error_code import ErrorCode
from .interact_error import InteractError


class PersistenceError(InteractError):
    """Raised by storage adapters; the store logs it and keeps running in memory."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("component", "persistence")
        super().__init__(ErrorCode.PERSISTENCE, message, **kwargs)


__all__ = ["PersistenceError"]
