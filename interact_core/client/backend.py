"""
Async HTTP client for the INTERACT backend.

Purpose
-------
Thin, typed wrapper over ``httpx.AsyncClient`` for the backend endpoints
(auth, chat, files, images, voice, users). Every JSON call resolves to an
:class:`ApiResponse` envelope ``{success, data, error, message}`` instead of
raising, so callers decide how to surface failures.

Credentials
-----------
The bearer token and API key are kept in memory and mirrored into an optional
:class:`IKeyValueStore` under ``access_token`` / ``api_key``. A ``401`` from any
endpoint clears both and invokes ``on_unauthorized`` (the login redirect hook
of the embedding application).

Streaming
---------
:meth:`BackendClient.open_stream` is an async context manager yielding a
:class:`ChatStream` (content type + raw byte chunks). The HTTP response is
released when the context exits, whether or not the chunks were consumed.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, Optional

import httpx

from ..base.dto import ApiResponse, ChatMessageBody
from ..base.errors import AuthError, ErrorCode, InteractError, TransportError, classify_exception
from ..base.http import create_async_client
from ..base.logging import LogContext, get_logger, log_event
from ..config.defaults import ACCESS_TOKEN_KEY, API_KEY_KEY
from ..persistence.interfaces import IKeyValueStore

UnauthorizedHook = Callable[[], None]


@dataclass
class ChatStream:
    """Live ``/chat/stream`` response body."""

    content_type: str
    chunks: AsyncIterator[bytes]

    @property
    def is_sse(self) -> bool:
        return self.content_type.split(";", 1)[0].strip().lower() == "text/event-stream"


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _error_text(payload: Any, default: str) -> str:
    if isinstance(payload, dict):
        for key in ("error", "message", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return default


class BackendClient:
    """Backend API client with bearer-token credentials."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        credentials: Optional[IKeyValueStore] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
        on_unauthorized: Optional[UnauthorizedHook] = None,
    ) -> None:
        """Create the client.

        Parameters
        ----------
        base_url:
            Backend base URL; defaults to ``api.base_url``.
        credentials:
            Durable store for the token and API key. Stored values are loaded
            eagerly.
        client:
            Pre-built ``httpx.AsyncClient``; when given, ``base_url``,
            ``transport`` and ``timeout`` are ignored and the caller keeps
            ownership.
        transport:
            Custom transport for the internally created client.
        on_unauthorized:
            Called after credentials are cleared on a ``401``.
        """
        self._owns_client = client is None
        self._client = client or create_async_client(base_url, timeout=timeout, transport=transport)
        self._credentials = credentials
        self._on_unauthorized = on_unauthorized
        self._logger = get_logger("interact.backend")
        self.access_token: Optional[str] = None
        self.api_key: Optional[str] = None
        self._load_stored_credentials()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Credentials

    def _load_stored_credentials(self) -> None:
        if self._credentials is None:
            return
        self.access_token = self._credentials.get(ACCESS_TOKEN_KEY)
        self.api_key = self._credentials.get(API_KEY_KEY)

    def set_credentials(self, access_token: str, api_key: Optional[str] = None) -> None:
        self.access_token = access_token
        if api_key:
            self.api_key = api_key
        if self._credentials is not None:
            self._credentials.set(ACCESS_TOKEN_KEY, access_token)
            if api_key:
                self._credentials.set(API_KEY_KEY, api_key)

    def clear_credentials(self) -> None:
        self.access_token = None
        self.api_key = None
        if self._credentials is not None:
            self._credentials.delete(ACCESS_TOKEN_KEY)
            self._credentials.delete(API_KEY_KEY)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    def _headers(self) -> Dict[str, str]:
        if self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        return {}

    def _handle_unauthorized(self, endpoint: str) -> None:
        self.clear_credentials()
        log_event(
            self._logger,
            "backend.unauthorized",
            LogContext(component="backend"),
            level=logging.WARNING,
            endpoint=endpoint,
            error_code=ErrorCode.AUTH.value,
        )
        if self._on_unauthorized is not None:
            self._on_unauthorized()

    # ------------------------------------------------------------------
    # Core request

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> ApiResponse:
        """Issue one request and wrap the outcome in an envelope.

        Transport failures become ``success=False`` with the error text and a
        classified ``error_code``; they are logged, never raised.
        """
        try:
            response = await self._client.request(
                method, endpoint, json=json, data=data, files=files, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            code = classify_exception(exc)
            log_event(
                self._logger,
                "backend.request_failed",
                LogContext(component="backend"),
                level=logging.WARNING,
                method=method,
                endpoint=endpoint,
                error_code=code.value,
                error=repr(exc),
            )
            return ApiResponse(success=False, error=str(exc) or "Network error", error_code=code)

        if response.status_code == 401:
            self._handle_unauthorized(endpoint)
        payload = _json_or_none(response)
        if not response.is_success:
            return ApiResponse(
                success=False,
                error=_error_text(payload, "An error occurred"),
                status_code=response.status_code,
            )
        return ApiResponse(success=True, data=payload, status_code=response.status_code)

    # ------------------------------------------------------------------
    # Auth

    async def signup(self, name: str, email: str, password: str) -> ApiResponse:
        return await self.request("POST", "/auth/signup", json={"name": name, "email": email, "password": password})

    async def login(self, email: str, password: str) -> ApiResponse:
        return await self.request("POST", "/auth/login", json={"email": email, "password": password})

    async def logout(self) -> ApiResponse:
        return await self.request("POST", "/auth/logout")

    async def refresh_token(self) -> ApiResponse:
        return await self.request("POST", "/auth/refresh")

    # ------------------------------------------------------------------
    # Chat

    async def send_message(self, conversation_id: str, content: str) -> ApiResponse:
        body = ChatMessageBody(conversation_id=conversation_id, content=content)
        return await self.request("POST", "/chat/message", json=body.model_dump(by_alias=True))

    @contextlib.asynccontextmanager
    async def open_stream(self, conversation_id: str, content: str) -> AsyncIterator[ChatStream]:
        """Open ``POST /chat/stream`` and yield its body as raw chunks.

        Raises ``AuthError`` on ``401`` (credentials cleared first) and
        ``TransportError`` on any other non-2xx status or connection failure.
        A timeout raises ``InteractError(code=TIMEOUT)``.
        """
        body = ChatMessageBody(conversation_id=conversation_id, content=content)
        ctx = LogContext(component="backend", conversation_id=conversation_id)
        try:
            async with self._client.stream(
                "POST", "/chat/stream", json=body.model_dump(by_alias=True), headers=self._headers()
            ) as response:
                if response.status_code == 401:
                    self._handle_unauthorized("/chat/stream")
                    raise AuthError(conversation_id=conversation_id)
                if not response.is_success:
                    raise TransportError(
                        f"stream failed with HTTP {response.status_code}",
                        conversation_id=conversation_id,
                    )
                log_event(self._logger, "backend.stream_opened", ctx, level=logging.DEBUG)
                yield ChatStream(
                    content_type=response.headers.get("content-type", ""),
                    chunks=response.aiter_bytes(),
                )
        except httpx.HTTPError as exc:
            code = classify_exception(exc)
            message = str(exc) or "Stream error"
            if code is ErrorCode.TRANSPORT:
                raise TransportError(message, conversation_id=conversation_id, raw=exc) from exc
            raise InteractError(
                code, message, component="backend", conversation_id=conversation_id, retryable=True, raw=exc
            ) from exc

    async def get_conversation(self, conversation_id: str) -> ApiResponse:
        return await self.request("GET", f"/chat/conversation/{conversation_id}")

    async def get_conversations(self) -> ApiResponse:
        return await self.request("GET", "/chat/conversations")

    async def update_conversation_title(self, conversation_id: str, title: str) -> ApiResponse:
        return await self.request("PATCH", f"/chat/conversation/{conversation_id}", json={"title": title})

    async def delete_conversation(self, conversation_id: str) -> ApiResponse:
        return await self.request("DELETE", f"/chat/conversation/{conversation_id}")

    # ------------------------------------------------------------------
    # Files, images, voice, users

    async def upload_file(
        self, filename: str, content: bytes, conversation_id: str, mime: str = "application/octet-stream"
    ) -> ApiResponse:
        return await self.request(
            "POST",
            "/files/upload",
            data={"conversationId": conversation_id},
            files={"file": (filename, content, mime)},
        )

    async def delete_file(self, file_id: str) -> ApiResponse:
        return await self.request("DELETE", f"/files/{file_id}")

    async def generate_image(self, prompt: str) -> ApiResponse:
        return await self.request("POST", "/images/generate", json={"prompt": prompt})

    async def delete_image(self, image_id: str) -> ApiResponse:
        return await self.request("DELETE", f"/images/{image_id}")

    async def transcribe(self, audio: bytes, filename: str = "audio.webm", mime: str = "audio/webm") -> ApiResponse:
        return await self.request("POST", "/voice/transcribe", files={"audio": (filename, audio, mime)})

    async def get_profile(self) -> ApiResponse:
        return await self.request("GET", "/users/profile")

    async def update_profile(self, updates: Dict[str, Any]) -> ApiResponse:
        return await self.request("PATCH", "/users/profile", json=updates)

    async def change_password(self, current_password: str, new_password: str) -> ApiResponse:
        return await self.request(
            "POST",
            "/users/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )


__all__ = ["BackendClient", "ChatStream", "UnauthorizedHook"]
