"""
Chat message model.

``Message`` is immutable once committed; corrections and streaming
accumulation go through :meth:`Message.patched`, which returns a new value.
``MessageMetadata`` is a typed record with a fixed core plus an explicit
``extra`` map for anything backend- or tool-specific.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

from ..clock import parse_iso, to_iso

Role = Literal["user", "assistant", "system", "tool"]
ROLES: Tuple[str, ...] = ("user", "assistant", "system", "tool")

AttachmentType = Literal["image", "audio", "file", "other"]


@dataclass(frozen=True)
class Attachment:
    """File, image or audio reference attached to a message."""

    type: AttachmentType = "other"
    id: Optional[str] = None
    url: Optional[str] = None
    name: Optional[str] = None
    size: Optional[int] = None
    mime: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Attachment":
        size = data.get("size")
        return cls(
            type=data.get("type") or "other",
            id=data.get("id"),
            url=data.get("url"),
            name=data.get("name"),
            size=int(size) if size is not None else None,
            mime=data.get("mime"),
        )


@dataclass(frozen=True)
class MessageMetadata:
    """Known metadata fields plus an open ``extra`` map.

    Attributes:
        generated_by: Reply source (``"reasoning-sim"``, ``"backend-stream"``).
        language: Normalized reply language (``"en"`` / ``"fr"``).
        model: Model tag of the generator.
        intent: Classified intent of the user turn being answered.
        topic: Classified topic of the user turn.
        sentiment: ``positive`` / ``negative`` / ``neutral``.
        temperature: Sampling temperature when a real model produced the reply.
        tool: Tool name for ``tool`` role messages.
        streaming: True while a streamed reply is still accumulating.
        extra: Anything else, JSON-serializable.
    """

    generated_by: Optional[str] = None
    language: Optional[str] = None
    model: Optional[str] = None
    intent: Optional[str] = None
    topic: Optional[str] = None
    sentiment: Optional[str] = None
    temperature: Optional[float] = None
    tool: Optional[str] = None
    streaming: Optional[bool] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"}
        out = {k: v for k, v in data.items() if v is not None}
        if self.extra:
            out["extra"] = dict(self.extra)
        return out

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["MessageMetadata"]:
        """Build from a mapping; unknown keys are folded into ``extra``."""
        if not data:
            return None
        known = {f.name for f in fields(cls)} - {"extra"}
        extra = dict(data.get("extra") or {})
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key == "extra":
                continue
            if key in known:
                kwargs[key] = value
            else:
                extra[key] = value
        return cls(extra=extra, **kwargs)


@dataclass(frozen=True)
class Message:
    """A committed chat turn.

    ``id`` is unique within its conversation. ``timestamp`` is expected to be
    non-decreasing within a conversation but this is not enforced.
    """

    id: str
    role: Role
    content: str
    conversation_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    language: Optional[str] = None
    attachments: Tuple[Attachment, ...] = ()
    metadata: Optional[MessageMetadata] = None

    def patched(self, patch: Mapping[str, Any]) -> "Message":
        """Return a copy with ``patch`` shallow-merged over this message.

        A ``metadata`` entry given as a mapping replaces the whole metadata
        record; unknown field names raise ``TypeError``.
        """
        changes = dict(patch)
        if isinstance(changes.get("metadata"), Mapping):
            changes["metadata"] = MessageMetadata.from_dict(changes["metadata"])
        if "attachments" in changes:
            changes["attachments"] = tuple(changes["attachments"] or ())
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "role": self.role, "content": self.content}
        if self.conversation_id is not None:
            out["conversation_id"] = self.conversation_id
        if self.timestamp is not None:
            out["timestamp"] = to_iso(self.timestamp)
        if self.language is not None:
            out["language"] = self.language
        if self.attachments:
            out["attachments"] = [a.to_dict() for a in self.attachments]
        if self.metadata is not None:
            out["metadata"] = self.metadata.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Message":
        role = data.get("role") or "assistant"
        if role not in ROLES:
            raise ValueError(f"unknown message role: {role!r}")
        return cls(
            id=str(data["id"]),
            role=role,
            content=str(data.get("content") or ""),
            conversation_id=data.get("conversation_id"),
            timestamp=parse_iso(data.get("timestamp")),
            language=data.get("language"),
            attachments=tuple(Attachment.from_dict(a) for a in data.get("attachments") or ()),
            metadata=MessageMetadata.from_dict(data.get("metadata")),
        )


__all__ = ["Role", "ROLES", "Attachment", "MessageMetadata", "Message"]
