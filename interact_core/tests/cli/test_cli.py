"""CLI parser, shell commands and the ``conversations`` subcommand."""

from __future__ import annotations

import asyncio
import json

from interact_core.base.models import Conversation
from interact_core.cli import main
from interact_core.cli.cli_parser import build_parser
from interact_core.cli.cli_shell import HELP, ChatShell
from interact_core.persistence import ConversationSnapshotRepo, SqliteKeyValueStore


def test_parser_defaults_to_chat_options():
    args = build_parser().parse_args([])
    assert args.cmd is None and args.backend is False and args.seed is None  # nosec B101

    args = build_parser().parse_args(["--db", "x.db", "chat", "--seed", "3", "--fast", "--language", "en"])
    assert (args.db, args.seed, args.fast, args.language) == ("x.db", 3, True, "en")  # nosec B101


def test_shell_session(make_store):
    out = []
    store = make_store()
    shell = ChatShell(store, out=out.append)
    lines = iter(["/new Trip", "bonjour", "/title Voyage", "/lang en", "/history", "/list", "/bogus", "/quit"])

    async def run():
        await store.initialize()
        await shell.run(read=lambda _prompt: next(lines))

    asyncio.run(run())
    active = store.conversations[store.active_conversation_id]
    assert active.title == "Voyage" and active.language == "en"  # nosec B101
    assert [m.role for m in active.messages] == ["user", "assistant"]  # nosec B101
    assert "[user] bonjour" in out  # nosec B101
    assert any(line.startswith("* ") and "Voyage" in line for line in out)  # nosec B101
    assert out[-1].startswith("! unknown command /bogus")  # nosec B101


def test_shell_help_and_unknown_conversation(make_store):
    out = []
    shell = ChatShell(make_store(), out=out.append)

    async def run():
        assert await shell.handle("/help")  # nosec B101
        assert await shell.handle("/use nope")  # nosec B101
        assert await shell.handle("   ")  # nosec B101
        return await shell.handle("/exit")

    assert asyncio.run(run()) is False  # nosec B101
    assert out == [HELP, "! unknown conversation 'nope'"]  # nosec B101
    assert "/history" in HELP  # nosec B101


def test_shell_reports_stream_errors(make_store):
    out = []
    shell = ChatShell(make_store(), stream=True, out=out.append)
    assert asyncio.run(shell.send("hello")) is None  # nosec B101
    assert out == ["! no backend configured for streaming"]  # nosec B101


def test_conversations_subcommand(tmp_path, capsys, clock):
    db = str(tmp_path / "cli.db")
    kv = SqliteKeyValueStore(db_path=db)
    ConversationSnapshotRepo(kv).save({"c1": Conversation(id="c1", title="Hello", updated_at=clock.now())})
    kv.close()

    assert main(["--db", db, "conversations"]) == 0  # nosec B101
    assert capsys.readouterr().out.strip() == "c1\tHello\t0\t2025-01-01T00:00:00+00:00"  # nosec B101

    assert main(["--db", db, "conversations", "--json"]) == 0  # nosec B101
    (entry,) = json.loads(capsys.readouterr().out)
    assert entry["id"] == "c1" and entry["messages"] == []  # nosec B101


def test_conversations_subcommand_empty(tmp_path, capsys):
    assert main(["--db", str(tmp_path / "empty.db"), "conversations"]) == 0  # nosec B101
    assert capsys.readouterr().out.strip() == "(no conversations)"  # nosec B101
