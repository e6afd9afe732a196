"""Channel names published by the conversation store."""

from __future__ import annotations

NEW_MESSAGE = "memory.new_message"
DELETE_MESSAGE = "memory.delete_message"
CLEAR_CONVERSATION = "memory.clear_conversation"
LANGUAGE_CHANGED = "memory.language_changed"
CONVERSATION_CREATED = "conversation.created"
CONVERSATION_UPDATED = "conversation.updated"
CONVERSATION_REMOVED = "conversation.removed"

__all__ = [
    "NEW_MESSAGE",
    "DELETE_MESSAGE",
    "CLEAR_CONVERSATION",
    "LANGUAGE_CHANGED",
    "CONVERSATION_CREATED",
    "CONVERSATION_UPDATED",
    "CONVERSATION_REMOVED",
]
