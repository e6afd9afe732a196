"""Reply synthesis: determinism, tone handling, memory recall and latency."""

from __future__ import annotations

import asyncio
import itertools
import random

import pytest

from interact_core.agent import default_agent_profile
from interact_core.base.models import EpisodicMemoryEntry, MemorySnapshot, Message
from interact_core.synthesis import ReasoningSynthesizer, SynthesisPolicy, TemplateCatalog, last_user_text
from interact_core.synthesis.templates import render


def _user(text: str) -> Message:
    return Message(id="u1", role="user", content=text)


def _make(clock, *, seed=7, sleep=None, **policy) -> ReasoningSynthesizer:
    async def _nosleep(_s):
        return None

    counter = itertools.count(1)
    return ReasoningSynthesizer(
        rng=random.Random(seed),
        clock=clock,
        sleep=sleep or _nosleep,
        id_factory=lambda: f"a{next(counter)}",
        policy=SynthesisPolicy(**{"latency_min_ms": 0, "latency_max_ms": 0, **policy}),
    )


def test_same_seed_and_clock_give_same_reply(clock):
    profile = default_agent_profile()
    history = [_user("bonjour")]
    first = asyncio.run(_make(clock).synthesize(profile, "c1", history, "fr"))
    second = asyncio.run(_make(clock).synthesize(profile, "c1", history, "fr"))

    assert first == second  # nosec B101
    assert first.role == "assistant" and first.conversation_id == "c1"  # nosec B101
    assert first.timestamp == clock.now()  # nosec B101
    assert first.metadata.intent == "greeting"  # nosec B101
    assert first.metadata.generated_by == "reasoning-sim"  # nosec B101
    assert first.metadata.language == "fr" and first.language == "fr"  # nosec B101


def test_reply_comes_from_the_language_pool(clock):
    catalog = TemplateCatalog()
    profile = default_agent_profile()
    reply = _make(clock).compose(profile, "c1", [_user("hello")], "en-GB")
    pool = [render(t, name=profile.name) for t in catalog.for_language("en").pool("greeting")]

    assert reply.language == "en"  # nosec B101
    assert any(reply.content.startswith(t) for t in pool)  # nosec B101
    assert "{name}" not in reply.content  # nosec B101


def test_warm_tone_appends_micro_phrase_and_emoji(clock):
    profile = default_agent_profile().patched({"personality": {"tone": "warm"}})
    reply = _make(clock, emoji_probability=1.0).compose(profile, "c1", [_user("il fait beau")], "fr")
    assert reply.content.endswith("Je suis là pour vous aider. 🙂")  # nosec B101

    quiet = _make(clock, emoji_probability=0.0).compose(profile, "c1", [_user("il fait beau")], "fr")
    assert quiet.content.endswith("Je suis là pour vous aider.")  # nosec B101


def test_missing_personality_defaults_to_warm(clock):
    profile = default_agent_profile().patched({"personality": None})
    reply = _make(clock, emoji_probability=1.0).compose(profile, None, [_user("ok")], "en")
    assert reply.content.endswith("I'm here to help. 🙂")  # nosec B101


def test_formal_tone_never_adds_emoji(clock):
    profile = default_agent_profile().patched({"personality": {"tone": "formal"}})
    reply = _make(clock, emoji_probability=1.0).compose(profile, "c1", [_user("ok")], "en")
    assert reply.content.endswith("I'm listening.")  # nosec B101


def test_impolite_question_gets_a_clarifying_prompt(clock):
    profile = default_agent_profile()
    blunt = _make(clock).compose(profile, "c1", [_user("why is that?")], "en")
    polite = _make(clock).compose(profile, "c1", [_user("why is that, please?")], "en")
    assert "Could you clarify?" in blunt.content  # nosec B101
    assert "Could you clarify?" not in polite.content  # nosec B101


def test_memory_reminder_uses_recent_episodic_text(clock):
    memory = MemorySnapshot(
        episodic=tuple(
            EpisodicMemoryEntry(id=str(i), timestamp=clock.now(), text=f"note {i}") for i in range(5)
        )
    )
    profile = default_agent_profile()
    reply = _make(clock, memory_recall_probability=1.0).compose(profile, "c1", [_user("ok")], "en", memory)
    assert reply.content.endswith("Quick note: I remember — note 2; note 3; note 4.")  # nosec B101

    without = _make(clock, memory_recall_probability=0.0).compose(profile, "c1", [_user("ok")], "en", memory)
    assert "Quick note" not in without.content  # nosec B101


def test_empty_history_uses_statement_pool(clock):
    reply = _make(clock).compose(None, "c1", [], "en")
    assert reply.metadata.intent == "unknown"  # nosec B101
    statements = TemplateCatalog().for_language("en").pool("statement")
    assert any(reply.content.startswith(t) for t in statements)  # nosec B101


def test_latency_is_drawn_within_policy_range(clock):
    delays = []

    async def record(seconds):
        delays.append(seconds)

    synth = _make(clock, sleep=record, latency_min_ms=300, latency_max_ms=1200)
    asyncio.run(synth.generate_simulated_response(None, "c1", [_user("hi")], "fr"))
    assert len(delays) == 1 and 0.3 <= delays[0] <= 1.2  # nosec B101


@pytest.mark.parametrize(
    "kwargs",
    [
        {"emoji_probability": 1.5},
        {"memory_recall_probability": -0.1},
        {"latency_min_ms": 10, "latency_max_ms": 5},
        {"memory_recall_window": 0},
    ],
)
def test_policy_validation(kwargs):
    with pytest.raises(ValueError):
        SynthesisPolicy(**kwargs)


def test_policy_from_config_overrides():
    policy = SynthesisPolicy.from_config({"emoji_probability": 0.0, "latency_max_ms": 500})
    assert policy.emoji_probability == 0.0 and policy.latency_max_ms == 500.0  # nosec B101


def test_last_user_text_skips_assistant_turns():
    history = [_user("  first  "), Message(id="a", role="assistant", content="reply")]
    assert last_user_text(history) == "first"  # nosec B101
    assert last_user_text([]) == ""  # nosec B101
