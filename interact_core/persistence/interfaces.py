"""Durable key-value store contract.

Local state (conversation map, language preference, credentials) is kept as
JSON values under ``(namespace, key)``. Concrete stores live in
``memory_kv`` and ``persistence/sqlite``.

Failure semantics:
- Implementations raise :class:`~interact_core.base.errors.PersistenceError`
  on I/O or encoding failures. Callers that treat persistence as
  best-effort (the conversation store) catch and log it.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class IKeyValueStore(Protocol):
    """Namespaced JSON key-value store."""

    namespace: str

    def get(self, key: str, default: Optional[Any] = None) -> Any:  # pragma: no cover - interface
        """Return the decoded value for ``key`` or ``default`` when absent."""
        ...

    def set(self, key: str, value: Any) -> None:  # pragma: no cover - interface
        """Store a JSON-serializable ``value`` under ``key``."""
        ...

    def delete(self, key: str) -> None:  # pragma: no cover - interface
        """Remove ``key``; absent keys are ignored."""
        ...


__all__ = ["IKeyValueStore"]
