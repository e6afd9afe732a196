"""Wire DTOs (pydantic) for backend payloads."""

from .backend import (
    ApiResponse,
    AuthResultDTO,
    ChatMessageBody,
    ChatMessageDTO,
    ConversationDataDTO,
    ImageResultDTO,
    TranscriptionDTO,
    UploadResultDTO,
    WireRole,
)

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
