"""Error taxonomy and exception classification."""

from __future__ import annotations

import asyncio

import httpx

from interact_core.base.errors import (
    AuthError,
    ErrorCode,
    InteractError,
    PersistenceError,
    SynthesisError,
    TransportError,
    classify_exception,
    status_to_code,
)


def test_subclasses_carry_their_codes():
    assert TransportError("boom").code is ErrorCode.TRANSPORT  # nosec B101
    assert TransportError("boom").retryable is True  # nosec B101
    assert SynthesisError("x").code is ErrorCode.SYNTHESIS  # nosec B101
    assert PersistenceError("x").component == "persistence"  # nosec B101
    err = AuthError()
    assert err.code is ErrorCode.AUTH and err.message == "authentication required"  # nosec B101


def test_str_includes_component_and_code():
    err = InteractError(ErrorCode.NOT_FOUND, "missing", component="chat_service")
    assert str(err) == "chat_service not_found: missing"  # nosec B101


def test_status_mapping():
    assert status_to_code(401) is ErrorCode.AUTH  # nosec B101
    assert status_to_code(429) is ErrorCode.RATE_LIMIT  # nosec B101
    assert status_to_code(599) is ErrorCode.SERVER_ERROR  # nosec B101
    assert status_to_code(418) is ErrorCode.UNKNOWN  # nosec B101


def test_classify_exception_precedence():
    assert classify_exception(SynthesisError("x")) is ErrorCode.SYNTHESIS  # nosec B101
    assert classify_exception(asyncio.TimeoutError()) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(httpx.ReadTimeout("slow")) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(httpx.ConnectError("down")) is ErrorCode.TRANSPORT  # nosec B101
    assert classify_exception(ValueError("?")) is ErrorCode.UNKNOWN  # nosec B101


def test_classify_http_status_error():
    request = httpx.Request("GET", "http://test/chat/conversations")
    response = httpx.Response(404, request=request)
    exc = httpx.HTTPStatusError("not found", request=request, response=response)
    assert classify_exception(exc) is ErrorCode.NOT_FOUND  # nosec B101
