"""Local durable state: key-value stores and the repos built on them."""

from .interfaces import IKeyValueStore
from .language import LanguagePreference, detect_language
from .memory_kv import InMemoryKeyValueStore
from .snapshot import ConversationSnapshotRepo
from .sqlite import SqliteKeyValueStore

__all__ = [
    "IKeyValueStore",
    "InMemoryKeyValueStore",
    "SqliteKeyValueStore",
    "ConversationSnapshotRepo",
    "LanguagePreference",
    "detect_language",
]
