"""Domain records and the agent state holder."""

from __future__ import annotations

from datetime import timedelta

import pytest

from interact_core.agent import AgentState, default_agent_profile
from interact_core.base.models import Attachment, Conversation, Message, MessageMetadata


def test_message_patch_returns_new_value(clock):
    original = Message(id="m1", role="user", content="hi", timestamp=clock.now())
    patched = original.patched({"content": "hello", "metadata": {"intent": "greeting", "source": "ui"}})

    assert original.content == "hi" and original.metadata is None  # nosec B101
    assert patched.content == "hello"  # nosec B101
    assert patched.metadata == MessageMetadata(intent="greeting", extra={"source": "ui"})  # nosec B101
    with pytest.raises(TypeError):
        original.patched({"colour": "blue"})


def test_conversation_dict_round_trip(clock):
    msg = Message(
        id="m1",
        role="assistant",
        content="salut",
        conversation_id="c1",
        timestamp=clock.now(),
        attachments=(Attachment(type="image", id="a1", url="http://x/a.png"),),
        metadata=MessageMetadata(generated_by="reasoning-sim", language="fr"),
    )
    conv = Conversation(id="c1", title="T", created_at=clock.now(), updated_at=clock.now(), messages=(msg,), language="fr")

    assert Conversation.from_dict(conv.to_dict()) == conv  # nosec B101


def test_unknown_role_is_rejected():
    with pytest.raises(ValueError):
        Message.from_dict({"id": "m1", "role": "robot", "content": "x"})


def test_update_agent_keeps_id_and_converts_nested_records():
    state = AgentState()
    profile = state.update_agent({"id": "other", "name": "Kora", "personality": {"tone": "warm"}})
    assert profile.id == "interact-core"  # nosec B101
    assert profile.name == "Kora" and profile.personality.tone == "warm"  # nosec B101

    assert state.reset_agent() == default_agent_profile()  # nosec B101


def test_episodic_memory_window_filters_by_conversation(clock):
    state = AgentState(clock=clock)
    state.add_episodic_memory("global note")
    for i in range(6):
        clock.advance(seconds=1)
        state.add_episodic_memory(f"c1 turn {i}", conversation_id="c1")
    state.add_episodic_memory("c2 turn", conversation_id="c2")

    recent = state.recent_episodic("c1", limit=3)
    assert [e.text for e in recent] == ["c1 turn 3", "c1 turn 4", "c1 turn 5"]  # nosec B101
    assert [e.text for e in state.recent_episodic("c2")] == ["global note", "c2 turn"]  # nosec B101
    assert state.recent_episodic("c1", limit=0) == []  # nosec B101
    assert recent[-1].timestamp - recent[0].timestamp == timedelta(seconds=2)  # nosec B101


def test_semantic_memory_is_part_of_every_snapshot():
    state = AgentState()
    state.add_semantic_memory("user prefers French", vector_id="v1", embedding=(0.1, 0.2))

    snap = state.memory_for("any")
    assert snap.episodic == ()  # nosec B101
    assert snap.semantic[0].embedding == [0.1, 0.2]  # nosec B101
    assert len(state.snapshot().semantic) == 1  # nosec B101
