"""Local reply synthesis: classifiers, templates and the synthesizer."""

from .classifiers import (
    classify_intent,
    classify_sentiment,
    classify_topic,
    is_polite,
    normalize_language,
    template_group,
)
from .synthesizer import ReasoningSynthesizer, SynthesisPolicy, last_user_text
from .templates import TemplateCatalog, load_template_catalog

__all__ = [
    "ReasoningSynthesizer",
    "SynthesisPolicy",
    "TemplateCatalog",
    "load_template_catalog",
    "last_user_text",
    "normalize_language",
    "classify_intent",
    "template_group",
    "classify_sentiment",
    "classify_topic",
    "is_polite",
]
