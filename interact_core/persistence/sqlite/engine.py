"""SQLite engine helpers for local durable state.

Purpose
-------
Open SQLite connections with the standard pragmas and ensure the key-value
schema exists.

External dependencies
---------------------
Standard library only (``sqlite3``). No side effects at import time.

Reliability
-----------
- ``busy_timeout`` from ``interact_core.config.defaults`` mitigates lock
  contention between the CLI and other local processes.
- WAL journaling with NORMAL synchronous mode.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ...config import get_config
from ...config.defaults import SQLITE_BUSY_TIMEOUT_MS, SQLITE_JOURNAL_MODE, SQLITE_SYNCHRONOUS


def get_db_path(db_path: Optional[str] = None) -> Path:
    """Return the database file path; defaults to the ``storage.db_path`` setting.

    ``~`` is expanded. ``":memory:"`` is passed through unchanged.
    """
    raw = db_path or get_config("storage")["db_path"]
    if raw == ":memory:":
        return Path(raw)
    return Path(raw).expanduser()


def create_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Open a connection with ``row_factory=sqlite3.Row`` and apply pragmas.

    The parent directory is created when missing.
    """
    path = get_db_path(db_path)
    if str(path) != ":memory:":
        path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute(f"PRAGMA journal_mode={SQLITE_JOURNAL_MODE};")
    conn.execute(f"PRAGMA synchronous={SQLITE_SYNCHRONOUS};")
    conn.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS};")  # ms
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the ``kv_store`` table if missing, then commit.

    ``kv_store``: ``(namespace, key)`` -> JSON value with ``updated_at``.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS kv_store (
            namespace TEXT NOT NULL,
            key TEXT NOT NULL,
            value_json TEXT NOT NULL,
            updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (namespace, key)
        );
        """
    )
    conn.commit()


@contextmanager
def db_session(db_path: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    """Yield a connection with the schema initialized.

    Commits on normal exit, rolls back on error, always closes.
    """
    conn = create_connection(db_path)
    try:
        init_schema(conn)
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


__all__ = ["get_db_path", "create_connection", "init_schema", "db_session"]
