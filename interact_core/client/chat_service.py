"""
Typed chat operations over :class:`BackendClient`.

Purpose
-------
Validate backend payloads with the pydantic DTOs, map them onto the domain
models, and turn unsuccessful envelopes into :class:`InteractError`. Also
exposes the live reply stream as :class:`ChatStreamEvent` values by running
the incremental decoder over the ``/chat/stream`` body.

Failure modes
-------------
- Unsuccessful envelope -> ``InteractError`` with a code derived from the HTTP
  status (``AuthError`` for ``401``).
- Payload that fails DTO validation, or carries an unparseable timestamp ->
  ``InteractError(code=VALIDATION)``.
- Request that never got a response -> the classified code (``TIMEOUT`` or
  ``TRANSPORT``).
- Stream transport failure -> ``TransportError``; malformed frames are skipped.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Callable, List, Optional, TypeVar

from pydantic import ValidationError

from ..base.cancellation import CancellationToken
from ..base.clock import Clock, SystemClock, parse_iso
from ..base.dto import (
    ApiResponse,
    ChatMessageDTO,
    ConversationDataDTO,
    ImageResultDTO,
    TranscriptionDTO,
    UploadResultDTO,
)
from ..base.errors import AuthError, ErrorCode, InteractError, status_to_code
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import Attachment, Conversation, ConversationSummary, Message, MessageMetadata
from ..base.streaming import ChatStreamEvent, StreamMetrics, aiter_ndjson, aiter_sse, event_from_frame
from .backend import BackendClient

T = TypeVar("T")


def map_chat_message(dto: ChatMessageDTO, *, clock: Optional[Clock] = None) -> Message:
    """Backend message -> domain ``Message``; a missing timestamp becomes now."""
    attachments = []
    for item in dto.attachments or ():
        if isinstance(item, str):
            attachments.append(Attachment(id=item))
        else:
            attachments.append(Attachment.from_dict(item))
    return Message(
        id=dto.id,
        role=dto.role,
        content=dto.content,
        conversation_id=dto.conversation_id,
        timestamp=parse_iso(dto.timestamp) or (clock or SystemClock()).now(),
        attachments=tuple(attachments),
        metadata=MessageMetadata.from_dict(dto.metadata),
    )


def map_conversation(dto: ConversationDataDTO, *, clock: Optional[Clock] = None) -> Conversation:
    return Conversation(
        id=dto.id,
        title=dto.title or "",
        created_at=parse_iso(dto.created_at),
        updated_at=parse_iso(dto.updated_at),
        messages=tuple(map_chat_message(m, clock=clock) for m in dto.messages),
    )


def map_summary(dto: ConversationDataDTO) -> ConversationSummary:
    """Listing entry; ``last_message_at`` is the conversation's ``updatedAt``."""
    return ConversationSummary(
        id=dto.id,
        title=dto.title or "",
        last_message_at=parse_iso(dto.updated_at),
        message_count=len(dto.messages) if dto.messages else None,
    )


class ChatService:
    """Chat, conversation and media operations returning domain values."""

    def __init__(self, backend: BackendClient, *, clock: Optional[Clock] = None) -> None:
        self.backend = backend
        self._clock = clock or SystemClock()
        self._logger = get_logger("interact.chat_service")

    def _unwrap(self, res: ApiResponse, operation: str, *, require_data: bool = True) -> Any:
        if res.success and (res.data is not None or not require_data):
            return res.data
        message = res.error or f"{operation} failed"
        if res.status_code == 401:
            raise AuthError(message)
        if res.status_code:
            code = status_to_code(res.status_code)
        else:
            code = res.error_code or ErrorCode.TRANSPORT
        retryable = code in (ErrorCode.TRANSPORT, ErrorCode.TIMEOUT)
        raise InteractError(code, message, component="chat_service", retryable=retryable)

    def _validate(self, model: Any, data: Any, operation: str) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise InteractError(
                ErrorCode.VALIDATION, f"{operation}: unexpected payload", component="chat_service", raw=exc
            ) from exc

    def _map(self, mapper: Callable[..., T], dto: Any, operation: str, **kwargs: Any) -> T:
        """Run a ``map_*`` helper; bad field values (timestamps) become ``VALIDATION``."""
        try:
            return mapper(dto, **kwargs)
        except ValueError as exc:
            raise InteractError(
                ErrorCode.VALIDATION, f"{operation}: {exc}", component="chat_service", raw=exc
            ) from exc

    async def send_message(self, conversation_id: str, content: str) -> Message:
        data = self._unwrap(await self.backend.send_message(conversation_id, content), "sendMessage")
        dto = self._validate(ChatMessageDTO, data, "sendMessage")
        return self._map(map_chat_message, dto, "sendMessage", clock=self._clock)

    async def get_conversation(self, conversation_id: str) -> Conversation:
        data = self._unwrap(await self.backend.get_conversation(conversation_id), "getConversation")
        dto = self._validate(ConversationDataDTO, data, "getConversation")
        return self._map(map_conversation, dto, "getConversation", clock=self._clock)

    async def get_conversations(self) -> List[ConversationSummary]:
        data = self._unwrap(await self.backend.get_conversations(), "getConversations")
        if not isinstance(data, list):
            raise InteractError(ErrorCode.VALIDATION, "getConversations: expected a list", component="chat_service")
        return [
            self._map(map_summary, self._validate(ConversationDataDTO, item, "getConversations"), "getConversations")
            for item in data
        ]

    async def update_conversation_title(self, conversation_id: str, title: str) -> Conversation:
        data = self._unwrap(
            await self.backend.update_conversation_title(conversation_id, title), "updateConversationTitle"
        )
        dto = self._validate(ConversationDataDTO, data, "updateConversationTitle")
        return self._map(map_conversation, dto, "updateConversationTitle", clock=self._clock)

    async def delete_conversation(self, conversation_id: str) -> None:
        self._unwrap(await self.backend.delete_conversation(conversation_id), "deleteConversation", require_data=False)

    async def upload_file(self, filename: str, content: bytes, conversation_id: str, mime: str) -> Attachment:
        data = self._unwrap(await self.backend.upload_file(filename, content, conversation_id, mime), "upload")
        dto = self._validate(UploadResultDTO, data, "upload")
        return Attachment(type="file", id=dto.id, url=dto.url, name=dto.name, size=dto.size, mime=dto.mime)

    async def generate_image(self, prompt: str) -> str:
        data = self._unwrap(await self.backend.generate_image(prompt), "image generation")
        return self._validate(ImageResultDTO, data, "image generation").image_url

    async def transcribe_voice(self, audio: bytes) -> str:
        data = self._unwrap(await self.backend.transcribe(audio), "transcription")
        return self._validate(TranscriptionDTO, data, "transcription").text

    async def stream_events(
        self, conversation_id: str, content: str, cancel: Optional[CancellationToken] = None
    ) -> AsyncIterator[ChatStreamEvent]:
        """Yield reply events from ``/chat/stream`` until the terminal event.

        The decoder is picked from the response content type: SSE for
        ``text/event-stream``, NDJSON otherwise.
        """
        ctx = LogContext(component="chat_service", conversation_id=conversation_id)
        metrics = StreamMetrics()
        metrics.start()
        async with self.backend.open_stream(conversation_id, content) as stream:
            decode = aiter_sse if stream.is_sse else aiter_ndjson
            normalized_log_event(
                self._logger,
                "chat.stream",
                ctx,
                phase="start",
                emitted=False,
                level=logging.DEBUG,
                mode="sse" if stream.is_sse else "ndjson",
            )
            async for frame in decode(stream.chunks, cancel=cancel):
                event = event_from_frame(frame)
                if event is None:
                    continue
                if event.delta:
                    metrics.record_delta()
                yield event
                if event.finish:
                    break
        metrics.finish()
        normalized_log_event(
            self._logger,
            "chat.stream",
            ctx,
            phase="finalize",
            emitted=metrics.emitted > 0,
            level=logging.DEBUG,
            cancelled=bool(cancel and cancel.cancelled) or None,
            deltas=metrics.emitted,
            time_to_first_delta_ms=metrics.time_to_first_delta_ms,
            total_duration_ms=metrics.total_duration_ms,
        )


__all__ = ["ChatService", "map_chat_message", "map_conversation", "map_summary"]
