"""
Agent persona models.

``AgentProfile`` describes the assistant's persona (name, mission, tone,
supported languages). It is read-mostly and changes only through an explicit
patch, independently of any conversation.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Mapping, Optional

Formality = Literal["adaptive", "formal", "informal"]
PrivacyLevel = Literal["strict", "standard", "relaxed"]


@dataclass(frozen=True)
class Personality:
    style: Optional[str] = None
    tone: Optional[str] = None
    humour: Optional[str] = None
    formality: Optional[Formality] = None
    values: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AgentIdentity:
    origin: Optional[str] = None
    culture: Optional[str] = None
    region: Optional[str] = None


@dataclass(frozen=True)
class AgentSettings:
    """Known agent settings plus an ``extra`` map for feature flags."""

    proactive: bool = False
    privacy_level: PrivacyLevel = "standard"
    telemetry: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AgentProfile:
    """Persona configuration consumed by the reply synthesizer."""

    id: str
    name: str
    role: Optional[str] = None
    mission: Optional[str] = None
    description: Optional[str] = None
    persona: Dict[str, Any] = field(default_factory=dict)
    identity: Optional[AgentIdentity] = None
    personality: Optional[Personality] = None
    supported_languages: List[str] = field(default_factory=list)
    settings: AgentSettings = field(default_factory=AgentSettings)

    def patched(self, patch: Mapping[str, Any]) -> "AgentProfile":
        """Shallow-merge top-level fields; nested records are replaced whole.

        Mappings given for ``personality``, ``identity`` or ``settings`` are
        converted to their record types.
        """
        changes = dict(patch)
        if isinstance(changes.get("personality"), Mapping):
            changes["personality"] = Personality(**changes["personality"])
        if isinstance(changes.get("identity"), Mapping):
            changes["identity"] = AgentIdentity(**changes["identity"])
        if isinstance(changes.get("settings"), Mapping):
            changes["settings"] = _settings_from_mapping(changes["settings"])
        return replace(self, **changes)


def _settings_from_mapping(data: Mapping[str, Any]) -> AgentSettings:
    known = {"proactive", "privacy_level", "telemetry"}
    extra = dict(data.get("extra") or {})
    extra.update({k: v for k, v in data.items() if k not in known and k != "extra"})
    return AgentSettings(
        proactive=bool(data.get("proactive", False)),
        privacy_level=data.get("privacy_level", "standard"),
        telemetry=bool(data.get("telemetry", False)),
        extra=extra,
    )


__all__ = [
    "Formality",
    "PrivacyLevel",
    "Personality",
    "AgentIdentity",
    "AgentSettings",
    "AgentProfile",
]
