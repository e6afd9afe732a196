"""ConversationStore: append protocol, lifecycle, events and persistence."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from interact_core.base.errors import PersistenceError, SynthesisError
from interact_core.base.events import channels
from interact_core.base.models import Conversation, Message
from interact_core.client import BackendClient, ChatService
from interact_core.persistence import ConversationSnapshotRepo
from interact_core.store.conversation_store import exchange_summary


def _user(mid: str, text: str) -> Message:
    return Message(id=mid, role="user", content=text)


def test_initialize_creates_a_local_conversation(make_store):
    store = make_store()
    state = asyncio.run(store.initialize())

    assert len(state.conversations) == 1  # nosec B101
    (conv,) = state.conversations.values()
    assert conv.id.startswith("local-")  # nosec B101
    assert conv.title == "Nouvelle conversation" and conv.language == "fr"  # nosec B101
    assert state.active_conversation_id == conv.id  # nosec B101
    assert not state.loading and state.error is None  # nosec B101


def test_initialize_prefers_stored_snapshot(make_store, kv, clock):
    stored = {
        "c2": Conversation(id="c2", title="latest", updated_at=clock.now()),
        "c1": Conversation(id="c1", title="older"),
    }
    ConversationSnapshotRepo(kv).save(stored)

    store = make_store()
    asyncio.run(store.initialize())
    assert list(store.conversations) == ["c2", "c1"]  # nosec B101
    assert store.active_conversation_id == "c2"  # nosec B101


def test_user_append_returns_reply_after_user_message(make_store):
    store = make_store()

    async def run():
        await store.initialize()
        cid = store.active_conversation_id
        reply = await store.append_message(cid, _user("u1", "bonjour"))
        return cid, reply

    cid, reply = asyncio.run(run())
    messages = store.get_conversation(cid)
    assert [m.id for m in messages] == ["u1", reply.id]  # nosec B101
    assert reply.role == "assistant" and reply.metadata.intent == "greeting"  # nosec B101
    assert messages[0].conversation_id == cid and messages[0].timestamp is not None  # nosec B101
    assert not store.loading  # nosec B101


def test_get_conversation_returns_an_independent_copy(make_store):
    store = make_store()
    store.create_conversation("c1")
    asyncio.run(store.append_message("c1", Message(id="s1", role="system", content="ctx")))

    copy = store.get_conversation("c1")
    copy.append(Message(id="x", role="user", content="rogue"))
    copy.clear()
    assert [m.id for m in store.get_conversation("c1")] == ["s1"]  # nosec B101


def test_non_user_append_does_not_synthesize(make_store, no_sleep):
    store = make_store()
    conv = store.create_conversation()
    result = asyncio.run(store.append_message(conv.id, Message(id="a1", role="assistant", content="note")))

    assert result.id == "a1"  # nosec B101
    assert [m.id for m in store.get_conversation()] == ["a1"]  # nosec B101
    assert no_sleep.calls == []  # nosec B101
    assert store.loading is False  # nosec B101


def test_create_conversation_twice(make_store, bus):
    created = []
    bus.subscribe(channels.CONVERSATION_CREATED, created.append)
    store = make_store()

    first = store.create_conversation()
    second = store.create_conversation()

    assert first.id != second.id  # nosec B101
    assert store.active_conversation_id == second.id  # nosec B101
    assert list(store.conversations) == [second.id, first.id]  # nosec B101
    assert [p["conversation_id"] for p in created] == [first.id, second.id]  # nosec B101


def test_user_turn_publishes_both_messages_and_records_memory(make_store, bus):
    seen = []
    bus.subscribe(channels.NEW_MESSAGE, seen.append)
    store = make_store()
    store.create_conversation("c1")

    reply = asyncio.run(store.append_message("c1", _user("u1", "merci")))

    assert [m.id for m in seen] == ["u1", reply.id]  # nosec B101
    (entry,) = store.agent.recent_episodic("c1")
    assert entry.text == exchange_summary(store.get_conversation("c1")[0], reply)  # nosec B101
    assert entry.text.startswith("merci → ")  # nosec B101
    assert entry.metadata["assistant_message_id"] == reply.id  # nosec B101


def test_append_to_unknown_conversation_creates_it(make_store):
    store = make_store()
    asyncio.run(store.append_message("ghost", _user("u1", "hello")))
    assert "ghost" in store.conversations  # nosec B101
    assert len(store.get_conversation("ghost")) == 2  # nosec B101


def test_same_conversation_turns_are_serialized(make_store, synthesizer):
    async def yielding_sleep(_seconds):
        await asyncio.sleep(0)

    synthesizer._sleep = yielding_sleep
    store = make_store(synthesizer=synthesizer)
    store.create_conversation("c1")

    async def run():
        await asyncio.gather(
            store.append_message("c1", _user("u1", "bonjour")),
            store.append_message("c1", _user("u2", "merci")),
        )

    asyncio.run(run())
    roles = [(m.role, m.id) for m in store.get_conversation("c1")]
    assert [r for r, _ in roles] == ["user", "assistant", "user", "assistant"]  # nosec B101
    assert roles[0][1] == "u1" and roles[2][1] == "u2"  # nosec B101


def test_loading_tracks_the_active_conversation(make_store, synthesizer):
    async def run():
        gate = asyncio.Event()

        async def gated_sleep(_seconds):
            await gate.wait()

        synthesizer._sleep = gated_sleep
        store = make_store(synthesizer=synthesizer)
        store.create_conversation("c1")
        store.create_conversation("c2")
        store.set_active_conversation("c1")

        task = asyncio.ensure_future(store.append_message("c1", _user("u1", "salut")))
        await asyncio.sleep(0)
        observed = [store.loading, store.is_in_flight("c1")]

        store.set_active_conversation("c2")
        observed.append(store.loading)
        store.set_active_conversation("c1")
        observed.append(store.loading)

        gate.set()
        await task
        observed.append(store.loading)
        return observed

    assert asyncio.run(run()) == [True, True, False, True, False]  # nosec B101


def test_synthesis_failure_keeps_user_message(make_store):
    class Broken:
        async def synthesize(self, *args, **kwargs):
            raise RuntimeError("template engine down")

    store = make_store(synthesizer=Broken())
    store.create_conversation("c1")

    with pytest.raises(SynthesisError) as info:
        asyncio.run(store.append_message("c1", _user("u1", "hello")))

    assert info.value.message == "template engine down"  # nosec B101
    assert [m.id for m in store.get_conversation("c1")] == ["u1"]  # nosec B101
    assert store.error == "template engine down"  # nosec B101
    assert not store.loading  # nosec B101


def test_persistence_failure_is_not_raised(make_store):
    class FailingRepo:
        def load(self):
            raise PersistenceError("disk unreadable")

        def save(self, conversations):
            raise PersistenceError("disk full")

    store = make_store(snapshot_repo=FailingRepo())

    async def run():
        await store.initialize()
        return await store.append_message(store.active_conversation_id, _user("u1", "hi"))

    reply = asyncio.run(run())
    assert reply.role == "assistant"  # nosec B101
    assert len(store.get_conversation()) == 2  # nosec B101


def test_every_change_is_written_through(make_store, kv):
    store = make_store()
    store.create_conversation("c1")
    asyncio.run(store.append_message("c1", _user("u1", "hello")))

    saved = ConversationSnapshotRepo(kv).load()
    assert [m.id for m in saved["c1"].messages] == [m.id for m in store.get_conversation("c1")]  # nosec B101


def test_message_edits_and_deletes(make_store, bus):
    deleted = []
    bus.subscribe(channels.DELETE_MESSAGE, deleted.append)
    store = make_store()
    store.create_conversation("c1")
    asyncio.run(store.append_message("c1", Message(id="n1", role="system", content="draft")))

    assert store.update_message("c1", "n1", {"content": "final"}).content == "final"  # nosec B101
    assert store.update_message("c1", "missing", {"content": "x"}) is None  # nosec B101
    assert store.update_message("nope", "n1", {"content": "x"}) is None  # nosec B101

    before = store.get_conversation("c1")
    store.delete_message("c1", "unknown-id")
    assert store.get_conversation("c1") == before  # nosec B101

    store.delete_message("c1", "n1")
    assert store.get_conversation("c1") == []  # nosec B101
    assert [d["message_id"] for d in deleted] == ["unknown-id", "n1"]  # nosec B101


def test_clear_language_and_remove(make_store, bus):
    events = []
    for channel in (channels.CLEAR_CONVERSATION, channels.LANGUAGE_CHANGED, channels.CONVERSATION_REMOVED):
        bus.subscribe(channel, lambda p, c=channel: events.append((c, p)))
    store = make_store()
    store.create_conversation("c1")
    asyncio.run(store.append_message("c1", _user("u1", "hello")))

    store.clear_conversation("c1")
    store.set_conversation_language("c1", "en")
    assert store.get_conversation("c1") == []  # nosec B101
    assert store.conversations["c1"].language == "en"  # nosec B101

    assert asyncio.run(store.remove_conversation("c1")) is True  # nosec B101
    assert asyncio.run(store.remove_conversation("c1")) is False  # nosec B101
    assert store.active_conversation_id is None  # nosec B101
    assert [c for c, _ in events] == [  # nosec B101
        channels.CLEAR_CONVERSATION,
        channels.LANGUAGE_CHANGED,
        channels.CONVERSATION_REMOVED,
    ]


def test_reply_language_follows_the_conversation(make_store):
    store = make_store()
    store.create_conversation("c1", language="en")
    reply = asyncio.run(store.append_message("c1", _user("u1", "hello")))
    assert reply.language == "en"  # nosec B101


def test_update_conversation_title(make_store, bus):
    updates = []
    bus.subscribe(channels.CONVERSATION_UPDATED, updates.append)
    store = make_store()
    store.create_conversation("c1")

    conv = asyncio.run(store.update_conversation("c1", {"title": "Plans"}))
    assert conv.title == "Plans"  # nosec B101
    assert updates == [{"conversation_id": "c1", "fields": ["title"]}]  # nosec B101
    assert asyncio.run(store.update_conversation("missing", {"title": "x"})) is None  # nosec B101


def _backend_chat(handler):
    backend = BackendClient(base_url="http://test/api", transport=httpx.MockTransport(handler))
    return ChatService(backend)


def test_initialize_falls_back_to_backend_summaries(make_store):
    def handler(request):
        return httpx.Response(
            200,
            json=[
                {"id": "srv-2", "title": "", "updatedAt": "2025-01-05T00:00:00Z"},
                {"id": "srv-1", "title": "Budget"},
            ],
        )

    store = make_store(chat_service=_backend_chat(handler))
    asyncio.run(store.initialize())

    assert list(store.conversations) == ["srv-2", "srv-1"]  # nosec B101
    assert store.conversations["srv-2"].title == "Conversation"  # nosec B101
    assert store.conversations["srv-1"].title == "Budget"  # nosec B101
    assert store.active_conversation_id == "srv-2"  # nosec B101


def test_initialize_uses_local_when_backend_fails(make_store):
    store = make_store(chat_service=_backend_chat(lambda request: httpx.Response(503)))
    asyncio.run(store.initialize())

    (conv,) = store.conversations.values()
    assert conv.id.startswith("local-") and conv.title == "Nouvelle conversation"  # nosec B101


def test_initialize_ignores_summaries_with_bad_timestamps(make_store):
    def handler(request):
        return httpx.Response(200, json=[{"id": "srv-1", "title": "x", "updatedAt": "yesterday"}])

    store = make_store(chat_service=_backend_chat(handler))
    state = asyncio.run(store.initialize())

    (conv,) = state.conversations.values()
    assert conv.id.startswith("local-")  # nosec B101
    assert state.active_conversation_id == conv.id  # nosec B101


def test_exchange_summary_clips_each_side():
    user = _user("u1", "  what is\nthe plan?  ")
    reply = Message(id="a1", role="assistant", content="x" * 200)
    summary = exchange_summary(user, reply)

    head, tail = summary.split(" → ")
    assert head == "what is the plan?"  # nosec B101
    assert len(tail) == 80 and tail.endswith("…")  # nosec B101
    assert exchange_summary(user, Message(id="a2", role="assistant", content="")) == "what is the plan?"  # nosec B101
