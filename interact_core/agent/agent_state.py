"""In-memory agent persona and short-term memory.

Holds the active :class:`AgentProfile` plus the episodic and semantic memory
lists. The conversation store reads a :class:`MemorySnapshot` from here before
each synthesis and records one episodic entry per completed exchange.

Thread safety: not thread-safe; owned by the event loop that drives the store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import uuid4

from ..base.clock import Clock, SystemClock
from ..base.models import (
    AgentIdentity,
    AgentProfile,
    AgentSettings,
    EpisodicMemoryEntry,
    MemorySnapshot,
    Personality,
    SemanticMemoryEntry,
)
from ..config.defaults import EPISODIC_CONTEXT_WINDOW

DEFAULT_SUPPORTED_LANGUAGES: Sequence[str] = (
    "fr",
    "en",
    "douala",
    "bassa",
    "bamiléke",
    "beti",
    "bulu",
    "feefe",
    "lingala",
    "hausa",
    "sw",
    "yoruba",
    "fulfulde",
    "zulu",
)


def default_agent_profile() -> AgentProfile:
    """The stock INTERACT persona."""
    return AgentProfile(
        id="interact-core",
        name="INTERACT",
        role="Digital assistant: eyes, hands and mind",
        mission=(
            "Devenir l'intelligence artificielle générale africaine de référence, porter le développement "
            "technologique de l'Afrique et valoriser les cultures et langues africaines."
        ),
        description=(
            "INTERACT observe, comprend, décide et agit pour exécuter des tâches, résoudre des problèmes "
            "et amplifier les capacités humaines."
        ),
        persona={"voice": "calm_confident"},
        identity=AgentIdentity(origin="Africa", culture="Pan-African", region="Global"),
        personality=Personality(
            style="amical, professionnel, pédagogique",
            tone="calm_confident",
            humour="light",
            formality="adaptive",
            values=["service", "respect", "inclusion", "sustainability"],
        ),
        supported_languages=list(DEFAULT_SUPPORTED_LANGUAGES),
        settings=AgentSettings(proactive=False, privacy_level="standard", telemetry=False),
    )


class AgentState:
    """Agent profile plus append-only episodic and semantic memory."""

    def __init__(self, profile: Optional[AgentProfile] = None, *, clock: Optional[Clock] = None) -> None:
        self._clock = clock or SystemClock()
        self._profile = profile or default_agent_profile()
        self._episodic: List[EpisodicMemoryEntry] = []
        self._semantic: List[SemanticMemoryEntry] = []

    @property
    def profile(self) -> AgentProfile:
        return self._profile

    def update_agent(self, patch: Mapping[str, Any]) -> AgentProfile:
        """Shallow-merge ``patch`` into the profile; ``id`` cannot change."""
        changes = {k: v for k, v in patch.items() if k != "id"}
        self._profile = self._profile.patched(changes)
        return self._profile

    def reset_agent(self) -> AgentProfile:
        """Restore the stock profile. Memory is kept."""
        self._profile = default_agent_profile()
        return self._profile

    def add_episodic_memory(
        self,
        text: Optional[str],
        *,
        conversation_id: Optional[str] = None,
        type: str = "event",
        metadata: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> EpisodicMemoryEntry:
        entry = EpisodicMemoryEntry(
            id=str(uuid4()),
            timestamp=timestamp or self._clock.now(),
            type=type,  # type: ignore[arg-type]
            conversation_id=conversation_id,
            text=text,
            metadata=dict(metadata or {}),
        )
        self._episodic.append(entry)
        return entry

    def add_semantic_memory(
        self,
        text: str,
        *,
        vector_id: Optional[str] = None,
        embedding: Optional[List[float]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> SemanticMemoryEntry:
        entry = SemanticMemoryEntry(
            id=str(uuid4()),
            text=text,
            vector_id=vector_id,
            created_at=self._clock.now(),
            embedding=list(embedding) if embedding is not None else None,
            metadata=dict(metadata or {}),
        )
        self._semantic.append(entry)
        return entry

    def recent_episodic(
        self, conversation_id: Optional[str] = None, limit: int = EPISODIC_CONTEXT_WINDOW
    ) -> List[EpisodicMemoryEntry]:
        """Most recent entries with no conversation affinity or a matching one.

        Returned oldest first.
        """
        relevant = [e for e in self._episodic if e.conversation_id is None or e.conversation_id == conversation_id]
        return relevant[-limit:] if limit > 0 else []

    def memory_for(self, conversation_id: Optional[str], limit: int = EPISODIC_CONTEXT_WINDOW) -> MemorySnapshot:
        """Snapshot handed to the synthesizer for ``conversation_id``."""
        return MemorySnapshot(
            episodic=tuple(self.recent_episodic(conversation_id, limit)),
            semantic=tuple(self._semantic),
        )

    def snapshot(self) -> MemorySnapshot:
        """Full memory, unfiltered."""
        return MemorySnapshot(episodic=tuple(self._episodic), semantic=tuple(self._semantic))


__all__ = ["AgentState", "default_agent_profile", "DEFAULT_SUPPORTED_LANGUAGES"]
