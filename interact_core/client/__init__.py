"""Backend collaborators: HTTP client, chat service and auth session."""

from .auth import AuthSession
from .backend import BackendClient, ChatStream
from .chat_service import ChatService, map_chat_message, map_conversation, map_summary

__all__ = [
    "BackendClient",
    "ChatStream",
    "ChatService",
    "AuthSession",
    "map_chat_message",
    "map_conversation",
    "map_summary",
]
