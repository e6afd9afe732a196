"""
Base layer for the conversation core.

Provider-agnostic building blocks shared by the store, the synthesizer and
the backend client:
- Models: immutable conversation, message, agent and memory records
- Errors: ``ErrorCode`` taxonomy and ``InteractError`` hierarchy
- Logging: structured JSON events
- Streaming: incremental NDJSON/SSE decoders and stream events
- Events: in-process pub/sub bus
- Cancellation and clock primitives
"""

from .cancellation import CancellationToken, CancelledError
from .clock import Clock, FixedClock, SystemClock
from .errors import (
    AuthError,
    ErrorCode,
    InteractError,
    PersistenceError,
    SynthesisError,
    TransportError,
    classify_exception,
)
from .events import EventBus, channels
from .models import (
    AgentProfile,
    Attachment,
    Conversation,
    ConversationSummary,
    EpisodicMemoryEntry,
    MemorySnapshot,
    Message,
    MessageMetadata,
    SemanticMemoryEntry,
)

__all__ = [
    "CancellationToken",
    "CancelledError",
    "Clock",
    "FixedClock",
    "SystemClock",
    "ErrorCode",
    "InteractError",
    "TransportError",
    "SynthesisError",
    "PersistenceError",
    "AuthError",
    "classify_exception",
    "EventBus",
    "channels",
    "AgentProfile",
    "Attachment",
    "Conversation",
    "ConversationSummary",
    "EpisodicMemoryEntry",
    "MemorySnapshot",
    "Message",
    "MessageMetadata",
    "SemanticMemoryEntry",
]
