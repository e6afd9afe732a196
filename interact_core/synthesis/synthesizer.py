"""
Reasoning reply synthesizer.

Purpose
-------
Local fallback reply source. Given the agent profile, the conversation
history, a target language and a short-term memory snapshot, produce one
assistant ``Message`` with intent, topic and sentiment metadata. It is a
randomized template selector, not a language model.

Determinism
-----------
Every source of variation is injected: ``rng`` (a ``random.Random``),
``clock``, ``sleep`` and ``id_factory``. With a seeded generator and a
``FixedClock`` two calls with identical inputs produce identical content and
metadata. Probabilities and the latency range come from
:class:`SynthesisPolicy`, itself built from the ``synthesis`` config section.

Random draw order per call: template choice, emoji (warm tone only), memory
reminder (only when episodic text is available), latency.
"""
from __future__ import annotations

import asyncio
import logging
import random
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from ..base.clock import Clock, SystemClock
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import AgentProfile, MemorySnapshot, Message, MessageMetadata
from ..config import defaults, get_config
from .classifiers import (
    classify_intent,
    classify_sentiment,
    classify_topic,
    is_polite,
    normalize_language,
    template_group,
)
from .templates import TemplateCatalog, render

Sleep = Callable[[float], Awaitable[Any]]
IdFactory = Callable[[], str]

_DEFAULT_TONE = "warm"


@dataclass(frozen=True)
class SynthesisPolicy:
    """Tunable probabilities and latency range (milliseconds)."""

    emoji_probability: float = defaults.SYNTH_EMOJI_PROBABILITY
    memory_recall_probability: float = defaults.SYNTH_MEMORY_RECALL_PROBABILITY
    memory_recall_window: int = defaults.SYNTH_MEMORY_RECALL_WINDOW
    latency_min_ms: float = defaults.SYNTH_LATENCY_MIN_MS
    latency_max_ms: float = defaults.SYNTH_LATENCY_MAX_MS

    def __post_init__(self) -> None:
        for name in ("emoji_probability", "memory_recall_probability"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.latency_min_ms < 0 or self.latency_max_ms < self.latency_min_ms:
            raise ValueError("latency range must satisfy 0 <= min <= max")
        if self.memory_recall_window < 1:
            raise ValueError("memory_recall_window must be >= 1")

    @classmethod
    def from_config(cls, overrides: Optional[Dict[str, Any]] = None) -> "SynthesisPolicy":
        cfg = get_config("synthesis", overrides)
        return cls(
            emoji_probability=float(cfg["emoji_probability"]),
            memory_recall_probability=float(cfg["memory_recall_probability"]),
            memory_recall_window=int(cfg["memory_recall_window"]),
            latency_min_ms=float(cfg["latency_min_ms"]),
            latency_max_ms=float(cfg["latency_max_ms"]),
        )


def _default_id() -> str:
    return f"assistant-{uuid.uuid4().hex}"


def last_user_text(messages: Sequence[Message]) -> str:
    """Stripped content of the most recent ``user`` message, or ``""``."""
    for message in reversed(messages):
        if message.role == "user":
            return (message.content or "").strip()
    return ""


class ReasoningSynthesizer:
    """Template-driven reply generator with injected randomness and time."""

    def __init__(
        self,
        *,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleep] = None,
        id_factory: Optional[IdFactory] = None,
        policy: Optional[SynthesisPolicy] = None,
        catalog: Optional[TemplateCatalog] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock = clock or SystemClock()
        self._sleep = sleep or asyncio.sleep
        self._id_factory = id_factory or _default_id
        self.policy = policy or SynthesisPolicy.from_config()
        self._catalog = catalog or TemplateCatalog()
        self._logger = get_logger("interact.synthesizer")

    async def synthesize(
        self,
        profile: Optional[AgentProfile],
        conversation_id: Optional[str],
        messages: Sequence[Message],
        language: Optional[str],
        memory: Optional[MemorySnapshot] = None,
    ) -> Message:
        """Compose a reply, then suspend for a simulated latency before returning it."""
        reply = self.compose(profile, conversation_id, messages, language, memory)
        delay_ms = self._draw_latency_ms()
        normalized_log_event(
            self._logger,
            "synthesis.reply",
            LogContext(component="synthesizer", conversation_id=conversation_id, message_id=reply.id),
            phase="compose",
            emitted=True,
            level=logging.DEBUG,
            intent=reply.metadata.intent if reply.metadata else None,
            language=reply.metadata.language if reply.metadata else None,
            latency_ms=round(delay_ms, 1),
        )
        await self._sleep(delay_ms / 1000.0)
        return reply

    async def generate_simulated_response(
        self,
        profile: Optional[AgentProfile],
        conversation_id: Optional[str],
        messages: Sequence[Message],
        language: Optional[str],
        memory: Optional[MemorySnapshot] = None,
    ) -> Message:
        """Backwards-compatible alias of :meth:`synthesize`."""
        return await self.synthesize(profile, conversation_id, messages, language, memory)

    def compose(
        self,
        profile: Optional[AgentProfile],
        conversation_id: Optional[str],
        messages: Sequence[Message],
        language: Optional[str],
        memory: Optional[MemorySnapshot] = None,
    ) -> Message:
        """Build the reply without the latency suspension."""
        lang = normalize_language(language)
        texts = self._catalog.for_language(lang)
        user_text = last_user_text(messages)
        intent = classify_intent(user_text)
        tone = _tone_of(profile)
        name = profile.name if profile is not None and profile.name else defaults.SYNTH_DEFAULT_AGENT_NAME

        pool = texts.pool(template_group(intent))
        content = render(pool[self._rng.randrange(len(pool))], name=name)

        if intent == "question" and user_text and not is_polite(user_text):
            content = f"{content} {texts.clarify}"
        micro = texts.micro.get(tone, "")
        if micro:
            content = f"{content} {micro}"
        if tone == "warm" and self._rng.random() < self.policy.emoji_probability:
            content = f"{content} {texts.emoji}"

        recent = self._recent_memory_text(memory)
        if recent and self._rng.random() < self.policy.memory_recall_probability:
            content = f"{content} {render(texts.memory_reminder, recent=recent)}"

        return Message(
            id=self._id_factory(),
            role="assistant",
            content=content,
            conversation_id=conversation_id,
            timestamp=self._clock.now(),
            language=lang,
            metadata=MessageMetadata(
                generated_by=defaults.SYNTH_GENERATED_BY,
                language=lang,
                model=defaults.SYNTH_MODEL_TAG,
                intent=intent,
                topic=classify_topic(user_text),
                sentiment=classify_sentiment(user_text),
            ),
        )

    def _recent_memory_text(self, memory: Optional[MemorySnapshot]) -> str:
        if memory is None or not memory.episodic:
            return ""
        window = memory.episodic[-self.policy.memory_recall_window :]
        return "; ".join(entry.text or "" for entry in window)

    def _draw_latency_ms(self) -> float:
        low, high = self.policy.latency_min_ms, self.policy.latency_max_ms
        return low + self._rng.random() * (high - low)


def _tone_of(profile: Optional[AgentProfile]) -> str:
    if profile is None or profile.personality is None:
        return _DEFAULT_TONE
    return profile.personality.tone or _DEFAULT_TONE


__all__ = ["SynthesisPolicy", "ReasoningSynthesizer", "last_user_text", "Sleep", "IdFactory"]
