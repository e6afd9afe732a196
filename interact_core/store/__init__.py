"""Conversation store and its reducer."""

from .conversation_store import ConversationStore
from .state import (
    Action,
    Add,
    Append,
    ChatState,
    DeleteMessage,
    Remove,
    Replace,
    SetActive,
    SetAll,
    SetError,
    SetLoading,
    Update,
    reduce,
)

__all__ = [
    "ConversationStore",
    "ChatState",
    "Action",
    "SetAll",
    "Add",
    "Update",
    "Remove",
    "Append",
    "Replace",
    "DeleteMessage",
    "SetActive",
    "SetLoading",
    "SetError",
    "reduce",
]
