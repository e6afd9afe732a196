"""Keyword classifiers for the reply synthesizer.

All rules run over the lower-cased user text and are evaluated in order;
the first matching rule wins. The specific gratitude phrases come before the
bare thanks keywords; both share the ``thanks`` template group.
"""
from __future__ import annotations

import re
from typing import Optional, Pattern, Sequence, Tuple

from ..config.defaults import DEFAULT_APP_LANGUAGE

_INTENT_RULES: Sequence[Tuple[str, Pattern[str]]] = (
    ("greeting", re.compile(r"^(bonjour|salut|hello|hi|hey)\b")),
    ("gratitude", re.compile(r"merci de|merci pour|gracias|thanks for|thank you for")),
    ("thanks", re.compile(r"merci|thank(s)?")),
    ("personal", re.compile(r"comment tu vas|\bça va\b|how are you|how's it going")),
    (
        "technical",
        re.compile(r"\bbug|error|crash|stack trace|code|débog|débug|implément|implement|npm|yarn|pnpm|compile\b"),
    ),
    ("task", re.compile(r"\b(je veux|i want|please create|créer|create|project)\b")),
    ("question", re.compile(r"\?$", re.MULTILINE)),
)

_SENTIMENT_RULES: Sequence[Tuple[str, Pattern[str]]] = (
    ("positive", re.compile(r"\b(merci|bien|super|génial|great|good|awesome)\b")),
    ("negative", re.compile(r"\b(triste|pas bien|mauvais|bad|terrible|hate)\b")),
)

_TOPIC_RULES: Sequence[Tuple[str, Pattern[str]]] = (
    ("api", re.compile(r"\b(api|endpoint|http|fetch|request|response)\b")),
    ("development", re.compile(r"\b(code|js|javascript|ts|typescript|react|next)\b")),
    ("project", re.compile(r"\b(projet|project|starter|template)\b")),
    ("image", re.compile(r"\b(image|photo|generate image)\b")),
)

_POLITENESS = re.compile(r"\bplease\b|\bsvp\b")

_GROUP_BY_INTENT = {
    "greeting": "greeting",
    "personal": "personal",
    "thanks": "thanks",
    "gratitude": "thanks",
    "technical": "technical",
    "task": "task",
    "question": "question",
}


def normalize_language(language: Optional[str]) -> str:
    """Map any language tag onto ``en`` or ``fr``.

    English tags (``en``, ``en-US``, ``english``) map to ``en``; everything
    else, African-language identifiers included, maps to ``fr``.
    """
    if not language:
        return DEFAULT_APP_LANGUAGE
    lower = language.strip().lower()
    if lower.startswith("en"):
        return "en"
    return "fr"


def _first_match(rules: Sequence[Tuple[str, Pattern[str]]], text: str, default: str) -> str:
    for label, pattern in rules:
        if pattern.search(text):
            return label
    return default


def classify_intent(text: str) -> str:
    """Return the intent label; empty text is ``unknown``."""
    if not text:
        return "unknown"
    return _first_match(_INTENT_RULES, text.lower(), "statement")


def template_group(intent: str) -> str:
    """Template pool for ``intent``; unmapped intents use ``statement``."""
    return _GROUP_BY_INTENT.get(intent, "statement")


def classify_sentiment(text: str) -> str:
    return _first_match(_SENTIMENT_RULES, text.lower(), "neutral")


def classify_topic(text: str) -> str:
    return _first_match(_TOPIC_RULES, text.lower(), "general")


def is_polite(text: str) -> bool:
    return bool(_POLITENESS.search(text.lower()))


__all__ = [
    "normalize_language",
    "classify_intent",
    "template_group",
    "classify_sentiment",
    "classify_topic",
    "is_polite",
]
