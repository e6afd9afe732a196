"""interact_core package

Conversational orchestration layer of the INTERACT assistant.

Public API (re-exported):
    - Version: ``__version__``
    - Store: :class:`ConversationStore`
    - Reply sources: :class:`ReasoningSynthesizer`, :class:`ChatService`
    - Collaborators: :class:`EventBus`, :class:`AgentState`,
      :class:`BackendClient`
    - Models and errors from :mod:`interact_core.base`
"""

from .agent import AgentState
from .base import (
    AuthError,
    CancellationToken,
    Conversation,
    ErrorCode,
    EventBus,
    InteractError,
    Message,
    PersistenceError,
    SynthesisError,
    TransportError,
)
from .client import BackendClient, ChatService
from .store import ConversationStore
from .synthesis import ReasoningSynthesizer, SynthesisPolicy

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConversationStore",
    "ReasoningSynthesizer",
    "SynthesisPolicy",
    "ChatService",
    "BackendClient",
    "EventBus",
    "AgentState",
    "CancellationToken",
    "Conversation",
    "Message",
    "ErrorCode",
    "InteractError",
    "TransportError",
    "SynthesisError",
    "PersistenceError",
    "AuthError",
]
