"""BackendClient against ``httpx.MockTransport``.

Covers the response envelope, bearer credentials, the 401 hook and the
``/chat/stream`` context manager.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from interact_core.base.errors import AuthError, ErrorCode, InteractError, TransportError
from interact_core.client import BackendClient
from interact_core.persistence import InMemoryKeyValueStore

BASE = "http://test/api"


def _client(handler, **kwargs) -> BackendClient:
    return BackendClient(base_url=BASE, transport=httpx.MockTransport(handler), **kwargs)


def test_success_envelope_and_bearer_header():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "m1", "content": "ok"})

    kv = InMemoryKeyValueStore()
    kv.set("access_token", "tok-1")

    async def run():
        async with _client(handler, credentials=kv) as client:
            return await client.send_message("c1", "hello")

    res = asyncio.run(run())
    assert res.success and res.data == {"id": "m1", "content": "ok"}  # nosec B101
    assert seen["path"] == "/api/chat/message"  # nosec B101
    assert seen["auth"] == "Bearer tok-1"  # nosec B101
    assert seen["body"] == {"conversationId": "c1", "content": "hello"}  # nosec B101


def test_error_status_uses_payload_text():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/users/profile"):
            return httpx.Response(404, json={"detail": "no such user"})
        return httpx.Response(500, text="<html>")

    async def run():
        async with _client(handler) as client:
            return await client.get_profile(), await client.get_conversations()

    missing, broken = asyncio.run(run())
    assert (missing.success, missing.error, missing.status_code) == (False, "no such user", 404)  # nosec B101
    assert broken.error == "An error occurred" and broken.status_code == 500  # nosec B101


def test_network_failure_becomes_unsuccessful_envelope():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def run():
        async with _client(handler) as client:
            return await client.get_conversations()

    res = asyncio.run(run())
    assert res.success is False and "connection refused" in res.error  # nosec B101
    assert res.error_code is ErrorCode.TRANSPORT  # nosec B101


def test_unauthorized_clears_credentials_and_calls_hook():
    calls = []
    kv = InMemoryKeyValueStore()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "expired"})

    async def run():
        async with _client(handler, credentials=kv, on_unauthorized=lambda: calls.append("login")) as client:
            client.set_credentials("tok-1", api_key="key-1")
            res = await client.get_profile()
            return client, res

    client, res = asyncio.run(run())
    assert res.success is False and res.error == "expired"  # nosec B101
    assert calls == ["login"]  # nosec B101
    assert client.access_token is None and not client.is_authenticated  # nosec B101
    assert kv.get("access_token") is None and kv.get("api_key") is None  # nosec B101


def test_multipart_upload():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["type"] = request.headers["content-type"]
        captured["body"] = request.content
        return httpx.Response(201, json={"id": "f1", "name": "a.txt"})

    async def run():
        async with _client(handler) as client:
            return await client.upload_file("a.txt", b"abc", "c1", "text/plain")

    res = asyncio.run(run())
    assert res.success and res.status_code == 201  # nosec B101
    assert captured["type"].startswith("multipart/form-data")  # nosec B101
    assert b'name="conversationId"' in captured["body"] and b"abc" in captured["body"]  # nosec B101


def test_open_stream_yields_content_type_and_chunks():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-type": "text/event-stream; charset=utf-8"}, content=b"data: x\n")

    async def run():
        async with _client(handler) as client:
            async with client.open_stream("c1", "hi") as stream:
                body = b"".join([chunk async for chunk in stream.chunks])
                return stream.is_sse, body

    assert asyncio.run(run()) == (True, b"data: x\n")  # nosec B101


@pytest.mark.parametrize("status, error", [(401, AuthError), (502, TransportError)])
def test_open_stream_failures_raise(status, error):
    kv = InMemoryKeyValueStore()
    kv.set("access_token", "tok-1")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"error": "nope"})

    async def run():
        async with _client(handler, credentials=kv) as client:
            async with client.open_stream("c1", "hi"):
                pass

    with pytest.raises(error):
        asyncio.run(run())
    if status == 401:
        assert kv.get("access_token") is None  # nosec B101


def test_open_stream_connection_error_is_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    async def run():
        async with _client(handler) as client:
            async with client.open_stream("c1", "hi"):
                pass

    with pytest.raises(TransportError):
        asyncio.run(run())


def test_open_stream_timeout_is_classified():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("too slow", request=request)

    async def run():
        async with _client(handler) as client:
            async with client.open_stream("c1", "hi"):
                pass

    with pytest.raises(InteractError) as info:
        asyncio.run(run())
    assert info.value.code is ErrorCode.TIMEOUT  # nosec B101
    assert not isinstance(info.value, TransportError)  # nosec B101
