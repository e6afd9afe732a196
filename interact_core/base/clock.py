"""Clock abstraction and ISO-8601 helpers.

Components that stamp messages take a :class:`Clock` so tests can pin time.
All timestamps are timezone-aware UTC.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    def now(self) -> datetime:  # pragma: no cover - interface
        ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock frozen at ``instant``; ``advance`` moves it forward explicitly."""

    def __init__(self, instant: datetime) -> None:
        self._instant = ensure_aware(instant)

    def now(self) -> datetime:
        return self._instant

    def advance(self, **delta: float) -> datetime:
        self._instant = self._instant + timedelta(**delta)
        return self._instant


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    return ensure_aware(value).isoformat() if value is not None else None


def parse_iso(value: object) -> Optional[datetime]:
    """Parse an ISO-8601 string (``Z`` suffix accepted); ``None``/blank yields ``None``.

    Raises ``ValueError`` for malformed strings.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(text))


__all__ = ["Clock", "SystemClock", "FixedClock", "ensure_aware", "to_iso", "parse_iso"]
