"""Domain models shared across the conversation layer.

The dataclasses live one-per-concern under ``models_parts``; this module is
the stable import path.
"""

from .models_parts import (
    ROLES,
    AgentIdentity,
    AgentProfile,
    AgentSettings,
    Attachment,
    Conversation,
    ConversationSummary,
    EpisodicMemoryEntry,
    MemorySnapshot,
    Message,
    MessageMetadata,
    Personality,
    Role,
    SemanticMemoryEntry,
)

__all__ = [
    "Role",
    "ROLES",
    "Attachment",
    "MessageMetadata",
    "Message",
    "Conversation",
    "ConversationSummary",
    "Personality",
    "AgentIdentity",
    "AgentSettings",
    "AgentProfile",
    "EpisodicMemoryEntry",
    "SemanticMemoryEntry",
    "MemorySnapshot",
]
