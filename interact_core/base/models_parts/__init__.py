"""Model parts package; import from ``interact_core.base.models``."""

from .agent_profile import AgentIdentity, AgentProfile, AgentSettings, Personality
from .conversation import Conversation, ConversationSummary
from .memory import EpisodicMemoryEntry, MemorySnapshot, SemanticMemoryEntry
from .message import ROLES, Attachment, Message, MessageMetadata, Role

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
