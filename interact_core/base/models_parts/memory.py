"""
Short-term memory records.

Episodic entries are append-only observations, optionally scoped to one
conversation. Semantic entries are standalone facts (optionally carrying an
embedding) not tied to a conversation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple

EpisodicType = Literal["event", "action", "observation"]


@dataclass(frozen=True)
class EpisodicMemoryEntry:
    id: str
    timestamp: datetime
    type: EpisodicType = "event"
    conversation_id: Optional[str] = None
    text: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SemanticMemoryEntry:
    id: str
    text: str
    vector_id: Optional[str] = None
    created_at: Optional[datetime] = None
    embedding: Optional[List[float]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MemorySnapshot:
    """Read-only memory view handed to the synthesizer."""

    episodic: Tuple[EpisodicMemoryEntry, ...] = ()
    semantic: Tuple[SemanticMemoryEntry, ...] = ()


__all__ = ["EpisodicType", "EpisodicMemoryEntry", "SemanticMemoryEntry", "MemorySnapshot"]
