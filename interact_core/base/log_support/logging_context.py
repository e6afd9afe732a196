"""Structured logging context object.

:class:`LogContext` carries the fields shared by most events emitted from the
conversation layer (component, conversation and message ids) plus an
``extra`` mapping. ``to_dict`` merges ``extra`` and prunes ``None`` values.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Structured context for conversation logging events."""

    component: Optional[str] = None
    conversation_id: Optional[str] = None
    message_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra", {}) or {}
        data.update({k: v for k, v in extra.items() if v is not None})
        return {k: v for k, v in data.items() if v is not None}


__all__ = ["LogContext"]
