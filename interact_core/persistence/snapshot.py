"""Serialized conversation map kept under the ``conversations`` key.

The value is a JSON object ``{conversation_id: conversation}``; insertion
order is display order (most recent first).
"""

from __future__ import annotations

from typing import Dict, Mapping

from ..base.errors import PersistenceError
from ..base.models import Conversation
from ..config.defaults import CONVERSATIONS_KEY
from .interfaces import IKeyValueStore


class ConversationSnapshotRepo:
    """Load and save the full conversation map."""

    def __init__(self, store: IKeyValueStore, key: str = CONVERSATIONS_KEY) -> None:
        self.store = store
        self.key = key

    def load(self) -> Dict[str, Conversation]:
        """Return the stored map, or ``{}`` when nothing was saved yet.

        Raises ``PersistenceError`` when the stored document cannot be decoded.
        """
        raw = self.store.get(self.key)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise PersistenceError(f"{self.key!r} snapshot is not an object")
        out: Dict[str, Conversation] = {}
        for conv_id, data in raw.items():
            try:
                conv = Conversation.from_dict({**data, "id": data.get("id") or conv_id})
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                raise PersistenceError(f"corrupt conversation {conv_id!r} in snapshot", raw=exc) from exc
            out[conv.id] = conv
        return out

    def save(self, conversations: Mapping[str, Conversation]) -> None:
        self.store.set(self.key, {cid: conv.to_dict() for cid, conv in conversations.items()})

    def clear(self) -> None:
        self.store.delete(self.key)


__all__ = ["ConversationSnapshotRepo"]
