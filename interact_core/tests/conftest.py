"""Shared fixtures for the interact_core test suite.

Every test runs with an isolated configuration: the external config file and
the environment overrides are cleared and the file cache is reset, so values
set by one test never leak into the next.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Callable, Iterator, List

import pytest

from interact_core.agent import AgentState
from interact_core.base.clock import FixedClock
from interact_core.base.events import EventBus
from interact_core.config import ENV_FIELD_MAP, reset_config_cache
from interact_core.persistence import ConversationSnapshotRepo, InMemoryKeyValueStore
from interact_core.store import ConversationStore
from interact_core.synthesis import ReasoningSynthesizer, SynthesisPolicy

EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Strip config-related env vars and point the dotenv lookup at nothing."""
    monkeypatch.delenv("INTERACT_CONFIG_FILE", raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "missing.env"))
    for env_name in ENV_FIELD_MAP.values():
        monkeypatch.delenv(env_name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(EPOCH)


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture()
def no_sleep() -> Callable[[float], object]:
    """Async sleep replacement that records requested delays."""
    calls: List[float] = []

    async def _sleep(seconds: float) -> None:
        calls.append(seconds)

    _sleep.calls = calls  # type: ignore[attr-defined]
    return _sleep


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def synthesizer(rng, clock, no_sleep) -> ReasoningSynthesizer:
    """Seeded synthesizer with no simulated latency."""
    return ReasoningSynthesizer(
        rng=rng,
        clock=clock,
        sleep=no_sleep,
        policy=SynthesisPolicy(latency_min_ms=0, latency_max_ms=0),
    )


@pytest.fixture()
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def make_store(bus, synthesizer, clock, kv) -> Callable[..., ConversationStore]:
    """Factory for stores sharing the test's bus, clock and key-value store."""

    def _make(**overrides) -> ConversationStore:
        kwargs = {
            "bus": bus,
            "synthesizer": synthesizer,
            "agent": AgentState(clock=clock),
            "snapshot_repo": ConversationSnapshotRepo(kv),
            "clock": clock,
            "language": "fr",
        }
        kwargs.update(overrides)
        return ConversationStore(**kwargs)

    return _make
