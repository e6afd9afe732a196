"""Factory for the backend's ``httpx.AsyncClient``.

Purpose:
    Build async clients with the base URL and timeout taken from the ``api``
    configuration section so call sites never hard-code either.

External dependencies:
    - ``httpx`` for the async HTTP client and test transports.

Lifecycle:
    The caller owns the returned client and must ``aclose()`` it (the
    ``BackendClient`` does so in its own ``aclose``/``async with``). Async
    clients are bound to the event loop that uses them, so no process-wide
    pool is kept.
"""

from __future__ import annotations

from typing import Optional

import httpx

from ...config import get_config


def create_async_client(
    base_url: Optional[str] = None,
    *,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Return a new ``httpx.AsyncClient`` for the backend.

    Parameters:
        base_url: Overrides ``api.base_url``.
        timeout: Seconds; overrides ``api.timeout_seconds``.
        transport: Custom transport (``httpx.MockTransport`` in tests).
    """
    cfg = get_config("api", {"base_url": base_url, "timeout_seconds": timeout})
    return httpx.AsyncClient(
        base_url=str(cfg["base_url"]).rstrip("/"),
        timeout=float(cfg["timeout_seconds"]),
        transport=transport,
    )


__all__ = ["create_async_client"]
