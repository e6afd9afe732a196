"""Conversation state and its pure reducer.

``reduce(state, action)`` never mutates its input. Actions that change nothing
return the very same ``ChatState`` object; actions that leave the conversation
map untouched keep the same map object, which the store uses to decide when
to persist.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Union

from ..base.models import Conversation, Message


@dataclass(frozen=True)
class ChatState:
    """Immutable store state. ``conversations`` is ordered most-recent-first."""

    conversations: Mapping[str, Conversation] = field(default_factory=dict)
    active_conversation_id: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None

    @property
    def active_conversation(self) -> Optional[Conversation]:
        """The active conversation; ``None`` when unset or dangling."""
        if self.active_conversation_id is None:
            return None
        return self.conversations.get(self.active_conversation_id)


@dataclass(frozen=True)
class SetAll:
    conversations: Mapping[str, Conversation]


@dataclass(frozen=True)
class Add:
    conversation: Conversation


@dataclass(frozen=True)
class Update:
    id: str
    patch: Mapping[str, Any]


@dataclass(frozen=True)
class Remove:
    id: str


@dataclass(frozen=True)
class Append:
    conversation_id: str
    message: Message


@dataclass(frozen=True)
class Replace:
    conversation_id: str
    message_id: str
    message: Message


@dataclass(frozen=True)
class DeleteMessage:
    conversation_id: str
    message_id: str


@dataclass(frozen=True)
class SetActive:
    id: Optional[str]


@dataclass(frozen=True)
class SetLoading:
    loading: bool


@dataclass(frozen=True)
class SetError:
    error: Optional[str]


Action = Union[SetAll, Add, Update, Remove, Append, Replace, DeleteMessage, SetActive, SetLoading, SetError]


def _with(state: ChatState, conversations: Dict[str, Conversation]) -> ChatState:
    return replace(state, conversations=conversations)


def reduce(state: ChatState, action: Action) -> ChatState:
    """Apply ``action`` to ``state`` and return the next state."""
    convs = state.conversations

    if isinstance(action, SetAll):
        return _with(state, dict(action.conversations))

    if isinstance(action, Add):
        # No collision guard: an existing id is overwritten and moved first.
        rest = {k: v for k, v in convs.items() if k != action.conversation.id}
        return _with(state, {action.conversation.id: action.conversation, **rest})

    if isinstance(action, Update):
        target = convs.get(action.id)
        if target is None:
            return state
        return _with(state, {**convs, action.id: target.patched(action.patch)})

    if isinstance(action, Remove):
        if action.id not in convs:
            return state
        return _with(state, {k: v for k, v in convs.items() if k != action.id})

    if isinstance(action, Append):
        target = convs.get(action.conversation_id) or Conversation(id=action.conversation_id, title="")
        updated = replace(
            target,
            messages=target.messages + (action.message,),
            updated_at=action.message.timestamp or target.updated_at,
        )
        return _with(state, {**convs, action.conversation_id: updated})

    if isinstance(action, Replace):
        target = convs.get(action.conversation_id)
        if target is None or not any(m.id == action.message_id for m in target.messages):
            return state
        messages = tuple(action.message if m.id == action.message_id else m for m in target.messages)
        updated = replace(target, messages=messages, updated_at=action.message.timestamp or target.updated_at)
        return _with(state, {**convs, action.conversation_id: updated})

    if isinstance(action, DeleteMessage):
        target = convs.get(action.conversation_id)
        if target is None:
            return state
        messages = tuple(m for m in target.messages if m.id != action.message_id)
        if len(messages) == len(target.messages):
            return state
        return _with(state, {**convs, action.conversation_id: replace(target, messages=messages)})

    if isinstance(action, SetActive):
        if action.id == state.active_conversation_id:
            return state
        return replace(state, active_conversation_id=action.id)

    if isinstance(action, SetLoading):
        if action.loading == state.loading:
            return state
        return replace(state, loading=action.loading)

    if isinstance(action, SetError):
        if action.error == state.error:
            return state
        return replace(state, error=action.error)

    raise TypeError(f"unknown action: {action!r}")


__all__ = [
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
