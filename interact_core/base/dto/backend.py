"""
Pydantic DTOs for the INTERACT backend wire format.

Purpose
-------
Validate payloads exchanged with the backend (``/chat/*``, ``/auth/*``,
``/files/*``, ``/images/*``, ``/voice/*``) before they are mapped onto the
domain dataclasses in :mod:`interact_core.base.models`. Field names follow the
backend's camelCase via aliases; either spelling is accepted on input.

Failure modes
-------------
Validation errors surface as ``pydantic.ValidationError``; the chat service
translates them into ``InteractError(code=VALIDATION)``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..errors import ErrorCode

WireRole = Literal["user", "assistant", "system", "tool"]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ApiResponse(_WireModel):
    """Envelope every client call resolves to: ``{success, data?, error?, message?}``.

    ``error_code`` is set when the request never got a response (timeout or
    connection failure).
    """

    success: bool
    data: Any = None
    error: Optional[str] = None
    message: Optional[str] = None
    status_code: Optional[int] = None
    error_code: Optional[ErrorCode] = None


class ChatMessageDTO(_WireModel):
    """Backend chat message. ``text`` is accepted as a legacy alias of ``content``."""

    id: str
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
    role: WireRole = "assistant"
    content: str = ""
    timestamp: Optional[str] = None
    attachments: Optional[List[Union[str, Dict[str, Any]]]] = None
    metadata: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_text(cls, data: Any) -> Any:
        if isinstance(data, dict):
            if not data.get("content") and data.get("text"):
                data = {**data, "content": data["text"]}
            if data.get("role") is None:
                data = {k: v for k, v in data.items() if k != "role"}
        return data


class ConversationDataDTO(_WireModel):
    id: str
    title: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
    messages: List[ChatMessageDTO] = Field(default_factory=list)


class ChatMessageBody(_WireModel):
    """Outbound body for ``/chat/message`` and ``/chat/stream``."""

    conversation_id: str = Field(..., min_length=1, alias="conversationId")
    content: str = Field(..., min_length=1)


class AuthResultDTO(_WireModel):
    access_token: str = Field(..., min_length=1)
    user: Optional[Dict[str, Any]] = None


class UploadResultDTO(_WireModel):
    id: str
    url: Optional[str] = None
    name: Optional[str] = None
    size: Optional[int] = None
    mime: Optional[str] = None


class ImageResultDTO(_WireModel):
    image_url: str = Field(..., alias="imageUrl")


class TranscriptionDTO(_WireModel):
    text: str


__all__ = [
    "WireRole",
    "ApiResponse",
    "ChatMessageDTO",
    "ConversationDataDTO",
    "ChatMessageBody",
    "AuthResultDTO",
    "UploadResultDTO",
    "ImageResultDTO",
    "TranscriptionDTO",
]
