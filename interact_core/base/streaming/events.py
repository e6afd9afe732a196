"""Chat stream events decoded from the backend's ``/chat/stream`` endpoint.

The backend emits either NDJSON frames shaped like
``{"type": "delta"|"final"|"error", "delta": str|null, "finish": bool,
"error": str|null}`` or SSE ``data:`` payloads. :func:`event_from_frame`
normalizes both into :class:`ChatStreamEvent`.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

SSE_DONE_SENTINEL = "[DONE]"


@dataclass
class ChatStreamEvent:
    """One incremental delta (or terminal marker) of a streamed reply.

    Fields:
      delta: text to append (``None`` for control events)
      finish: True on the terminal event
      error: error string; an error event is implicitly terminal
      message_id: server-assigned id of the reply, when the backend sends one
      metadata: extra keys from the frame (model tags, usage)
      raw: the decoded frame, for debugging
    """

    delta: Optional[str]
    finish: bool = False
    error: Optional[str] = None
    message_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    raw: Any = None

    def is_error(self) -> bool:
        return self.error is not None


_FRAME_KEYS = {"type", "delta", "content", "text", "finish", "error", "id", "messageId", "message_id"}


def event_from_frame(frame: Any) -> Optional[ChatStreamEvent]:
    """Translate a decoded frame into an event; ``None`` for unusable frames.

    String payloads (SSE) are parsed as JSON when they look like an object,
    otherwise they are treated as a raw text delta. ``[DONE]`` is terminal.
    """
    if isinstance(frame, str):
        text = frame
        if text.strip() == SSE_DONE_SENTINEL:
            return ChatStreamEvent(delta=None, finish=True, raw=frame)
        if text.lstrip().startswith("{"):
            try:
                frame = json.loads(text)
            except json.JSONDecodeError:
                return ChatStreamEvent(delta=text, raw=text)
        else:
            return ChatStreamEvent(delta=text, raw=text)
    if not isinstance(frame, dict):
        return None

    kind = frame.get("type")
    error = frame.get("error")
    if kind == "error" and not error:
        error = "stream error"
    delta = frame.get("delta")
    if delta is None:
        delta = frame.get("content", frame.get("text"))
    finish = bool(frame.get("finish")) or kind == "final" or error is not None
    message_id = frame.get("message_id") or frame.get("messageId") or frame.get("id")
    extra = {k: v for k, v in frame.items() if k not in _FRAME_KEYS and v is not None}
    return ChatStreamEvent(
        delta=str(delta) if delta is not None else None,
        finish=finish,
        error=str(error) if error is not None else None,
        message_id=str(message_id) if message_id is not None else None,
        metadata=extra,
        raw=frame,
    )


@dataclass
class StreamAccumulator:
    """Running state of one streamed reply, fed event by event."""

    text: str = ""
    message_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    events: int = 0
    finished: bool = False

    def feed(self, event: ChatStreamEvent) -> bool:
        """Fold ``event`` in; True when the text grew.

        An error event is terminal and its delta, if any, is dropped.
        """
        self.events += 1
        self.message_id = event.message_id or self.message_id
        self.metadata.update(event.metadata)
        if event.error is not None:
            self.error = event.error
            self.finished = True
            return False
        if event.finish:
            self.finished = True
        if event.delta:
            self.text += event.delta
            return True
        return False


__all__ = ["ChatStreamEvent", "StreamAccumulator", "event_from_frame", "SSE_DONE_SENTINEL"]
