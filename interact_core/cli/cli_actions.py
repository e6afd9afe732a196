"""Subcommand handlers for ``interact-chat``.

Each handler builds what it needs from the parsed arguments, runs, and
returns a process exit code.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import random
from typing import Optional

from ..agent import AgentState
from ..base.events import EventBus
from ..base.logging import configure_logger
from ..client import BackendClient, ChatService
from ..persistence import ConversationSnapshotRepo, LanguagePreference, SqliteKeyValueStore
from ..store import ConversationStore
from ..synthesis import ReasoningSynthesizer, SynthesisPolicy
from .cli_shell import ChatShell


async def _no_sleep(_: float) -> None:
    return None


def apply_logging(level: Optional[str]) -> None:
    if level:
        configure_logger(level=level.upper())


def build_store(
    args: argparse.Namespace, kv: SqliteKeyValueStore, backend: Optional[BackendClient] = None
) -> ConversationStore:
    """Assemble a store over the SQLite snapshot with a local synthesizer."""
    seed = getattr(args, "seed", None)
    policy = SynthesisPolicy.from_config()
    if getattr(args, "fast", False):
        policy = SynthesisPolicy(
            emoji_probability=policy.emoji_probability,
            memory_recall_probability=policy.memory_recall_probability,
            memory_recall_window=policy.memory_recall_window,
            latency_min_ms=0,
            latency_max_ms=0,
        )
    synthesizer = ReasoningSynthesizer(
        rng=random.Random(seed) if seed is not None else None,
        sleep=_no_sleep if getattr(args, "fast", False) else None,
        policy=policy,
    )
    language = getattr(args, "language", None) or LanguagePreference(kv).get()
    return ConversationStore(
        bus=EventBus(),
        synthesizer=synthesizer,
        agent=AgentState(),
        snapshot_repo=ConversationSnapshotRepo(kv),
        chat_service=ChatService(backend) if backend is not None else None,
        language=language,
    )


async def _chat(args: argparse.Namespace, kv: SqliteKeyValueStore) -> None:
    backend = BackendClient(base_url=args.api_url, credentials=kv) if args.backend else None
    try:
        store = build_store(args, kv, backend)
        await store.initialize()
        await ChatShell(store, stream=args.backend).run()
    finally:
        if backend is not None:
            await backend.aclose()


def run_chat(args: argparse.Namespace) -> int:
    kv = SqliteKeyValueStore(db_path=args.db)
    try:
        asyncio.run(_chat(args, kv))
    except KeyboardInterrupt:
        print()
    finally:
        kv.close()
    return 0


def run_conversations(args: argparse.Namespace) -> int:
    kv = SqliteKeyValueStore(db_path=args.db)
    try:
        conversations = ConversationSnapshotRepo(kv).load()
    finally:
        kv.close()
    if args.json:
        print(json.dumps([c.to_dict() for c in conversations.values()], ensure_ascii=False, indent=2))
        return 0
    if not conversations:
        print("(no conversations)")
        return 0
    for cid, conv in conversations.items():
        updated = conv.updated_at.isoformat() if conv.updated_at else "-"
        print(f"{cid}\t{conv.title or '-'}\t{len(conv.messages)}\t{updated}")
    return 0


__all__ = ["build_store", "run_chat", "run_conversations", "apply_logging"]
