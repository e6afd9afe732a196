"""
Conversation and conversation-summary models.

A ``Conversation`` owns an append-ordered tuple of messages; the store is the
only writer and swaps whole values on every commit.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple

from ..clock import parse_iso, to_iso
from .message import Message


@dataclass(frozen=True)
class Conversation:
    """A titled, ordered sequence of messages with its own language."""

    id: str
    title: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    messages: Tuple[Message, ...] = ()
    language: Optional[str] = None

    def patched(self, patch: Mapping[str, Any]) -> "Conversation":
        """Shallow-merge ``patch`` (field names) into a new value."""
        changes = dict(patch)
        changes.pop("id", None)
        if "messages" in changes:
            changes["messages"] = tuple(changes["messages"] or ())
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
            "messages": [m.to_dict() for m in self.messages],
            "language": self.language,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Conversation":
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            created_at=parse_iso(data.get("created_at")),
            updated_at=parse_iso(data.get("updated_at")),
            messages=tuple(Message.from_dict(m) for m in data.get("messages") or ()),
            language=data.get("language"),
        )


@dataclass(frozen=True)
class ConversationSummary:
    """Listing entry returned by the backend (no messages)."""

    id: str
    title: str
    last_message_at: Optional[datetime] = None
    message_count: Optional[int] = None


__all__ = ["Conversation", "ConversationSummary"]
