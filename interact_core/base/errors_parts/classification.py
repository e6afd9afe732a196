"""
Map arbitrary exceptions onto normalized :class:`ErrorCode` values.

Precedence: ``InteractError`` passthrough, timeouts, cancellation, HTTP status
(``httpx.HTTPStatusError`` or any object exposing ``status_code``), httpx
transport errors, then ``UNKNOWN``.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

import httpx

from .error_code import ErrorCode
from .interact_error import InteractError

_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSPORT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


def _extract_status(exc: BaseException) -> Optional[int]:
    """Return an HTTP status carried by ``exc`` (directly or via ``response``)."""
    val = getattr(exc, "status_code", None)
    if isinstance(val, int) and 100 <= val < 600:
        return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


def status_to_code(status: int) -> ErrorCode:
    """Return the code for an HTTP status; unmapped 5xx are server errors."""
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    if status >= 500:
        return ErrorCode.SERVER_ERROR
    return ErrorCode.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`."""
    if isinstance(exc, InteractError):
        return exc.code
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, asyncio.CancelledError):
        return ErrorCode.CANCELLED
    status = _extract_status(exc)
    if status is not None:
        return status_to_code(status)
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSPORT
    return ErrorCode.UNKNOWN


__all__ = ["classify_exception", "status_to_code"]
