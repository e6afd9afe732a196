"""Process-local ``IKeyValueStore`` for tests and ephemeral sessions.

Values are round-tripped through JSON on ``set`` so callers observe the same
encoding constraints as with the SQLite store.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ..base.errors import PersistenceError
from ..config.defaults import STORAGE_NAMESPACE


class InMemoryKeyValueStore:
    """Dictionary-backed key-value store. Not thread-safe."""

    def __init__(self, namespace: str = STORAGE_NAMESPACE) -> None:
        self.namespace = namespace
        self._data: Dict[str, str] = {}

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        raw = self._data.get(key)
        return default if raw is None else json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"value for {key!r} is not JSON-serializable", raw=exc) from exc

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list:
        return sorted(self._data)


__all__ = ["InMemoryKeyValueStore"]
