"""Failure of the local reply synthesizer, surfaced by ``append_message``."""
from __future__ import annotations

from typing import Any

from .error_code import ErrorCode
from .interact_error import InteractError


class SynthesisError(InteractError):
    """The reply generator raised; the user message stays committed."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("component", "synthesizer")
        super().__init__(ErrorCode.SYNTHESIS, message, **kwargs)


__all__ = ["SynthesisError"]
