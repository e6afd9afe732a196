"""SQLite-backed ``IKeyValueStore``.

Each ``set`` is an upsert committed immediately; the store owns its
connection. ``sqlite3.Error`` and JSON encoding failures are translated to
:class:`PersistenceError`.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from typing import Any, List, Optional

from ...base.errors import PersistenceError
from ...config.defaults import STORAGE_NAMESPACE
from .engine import create_connection, init_schema


class SqliteKeyValueStore:
    """Namespaced JSON values in the ``kv_store`` table."""

    def __init__(
        self,
        conn: Optional[sqlite3.Connection] = None,
        *,
        db_path: Optional[str] = None,
        namespace: str = STORAGE_NAMESPACE,
    ) -> None:
        """Wrap ``conn`` or open one at ``db_path`` (schema ensured either way)."""
        self.namespace = namespace
        try:
            self.conn = conn if conn is not None else create_connection(db_path)
            init_schema(self.conn)
        except sqlite3.Error as exc:
            raise PersistenceError(f"cannot open key-value store: {exc}", raw=exc) from exc

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        try:
            row = self.conn.execute(
                "SELECT value_json FROM kv_store WHERE namespace = ? AND key = ?",
                (self.namespace, key),
            ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"read failed for {key!r}: {exc}", raw=exc) from exc
        if row is None:
            return default
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"stored value for {key!r} is not valid JSON", raw=exc) from exc

    def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"value for {key!r} is not JSON-serializable", raw=exc) from exc
        now = datetime.now(timezone.utc).isoformat()
        try:
            self.conn.execute(
                """
                INSERT INTO kv_store(namespace, key, value_json, updated_at) VALUES(?, ?, ?, ?)
                ON CONFLICT(namespace, key) DO UPDATE SET
                    value_json = excluded.value_json,
                    updated_at = excluded.updated_at
                """,
                (self.namespace, key, payload, now),
            )
            self.conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"write failed for {key!r}: {exc}", raw=exc) from exc

    def delete(self, key: str) -> None:
        try:
            self.conn.execute("DELETE FROM kv_store WHERE namespace = ? AND key = ?", (self.namespace, key))
            self.conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"delete failed for {key!r}: {exc}", raw=exc) from exc

    def keys(self) -> List[str]:
        rows = self.conn.execute(
            "SELECT key FROM kv_store WHERE namespace = ? ORDER BY key", (self.namespace,)
        ).fetchall()
        return [r[0] for r in rows]

    def close(self) -> None:
        self.conn.close()


__all__ = ["SqliteKeyValueStore"]
