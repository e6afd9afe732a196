"""SQLite adapters for local durable state."""

from .engine import create_connection, db_session, get_db_path, init_schema
from .kv_repo import SqliteKeyValueStore

__all__ = ["SqliteKeyValueStore", "create_connection", "db_session", "get_db_path", "init_schema"]
