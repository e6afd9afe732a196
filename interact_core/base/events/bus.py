"""In-process publish/subscribe bus.

One ``EventBus`` is created per process (or per test) and handed to the
conversation store and to any subscriber such as the memory recorder. Delivery
is synchronous, in subscription order as of the moment ``publish`` is called.
A handler that raises is logged and skipped; it never reaches the publisher
or prevents later handlers from running.
"""
from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Callable, Dict, List

from ..logging import LogContext, get_logger, log_event

Handler = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class EventBus:
    """Named-channel pub/sub with handler failure isolation."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._handlers: Dict[str, List[Handler]] = {}
        self._lock = RLock()
        self._logger = logger or get_logger("interact.events")

    def subscribe(self, channel: str, handler: Handler) -> Unsubscribe:
        """Register ``handler`` on ``channel`` and return an idempotent unsubscribe."""
        with self._lock:
            self._handlers.setdefault(channel, []).append(handler)

        def _unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(channel)
                if handlers and handler in handlers:
                    handlers.remove(handler)
                if handlers == []:
                    self._handlers.pop(channel, None)

        return _unsubscribe

    def publish(self, channel: str, payload: Any = None) -> int:
        """Deliver ``payload`` to current subscribers; return how many succeeded."""
        with self._lock:
            handlers = list(self._handlers.get(channel, ()))
        delivered = 0
        for handler in handlers:
            try:
                handler(payload)
            except Exception as exc:
                log_event(
                    self._logger,
                    "events.handler_error",
                    LogContext(component="events", extra={"channel": channel}),
                    level=logging.ERROR,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=repr(exc),
                )
                continue
            delivered += 1
        return delivered

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._handlers.get(channel, ()))

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()


__all__ = ["EventBus", "Handler", "Unsubscribe"]
