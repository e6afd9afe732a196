"""Bilingual reply template catalog.

The catalog is a JSON resource bundled under
``interact_core.synthesis.fixtures`` so wording can change without touching
code. Each language block carries template pools keyed by intent group, the
tone micro-phrases, the clarifying prompt, the emoji and the memory reminder
format. ``{name}`` and ``{recent}`` are the only placeholders.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from importlib import resources
from typing import Any, Dict, List, Mapping, Optional

_TEMPLATE_RESOURCE = "templates.json"
_FIXTURE_PACKAGE = "interact_core.synthesis.fixtures"
FALLBACK_GROUP = "statement"


def load_template_catalog(resource: str = _TEMPLATE_RESOURCE) -> Dict[str, Any]:
    """Load and parse the bundled template catalog."""
    data = resources.files(_FIXTURE_PACKAGE).joinpath(resource).read_text(encoding="utf-8")
    return json.loads(data)


@dataclass(frozen=True)
class LanguageTemplates:
    pools: Mapping[str, List[str]]
    micro: Mapping[str, str]
    clarify: str
    emoji: str
    memory_reminder: str

    def pool(self, group: str) -> List[str]:
        """Return the pool for ``group``, falling back to the statement pool."""
        return list(self.pools.get(group) or self.pools[FALLBACK_GROUP])


class TemplateCatalog:
    """Lookup facade over the parsed catalog."""

    def __init__(self, catalog: Optional[Mapping[str, Any]] = None) -> None:
        self._catalog = catalog if catalog is not None else load_template_catalog()
        self.default_language: str = str(self._catalog.get("default_language", "fr"))
        self._languages: Dict[str, LanguageTemplates] = {}
        for key, block in (self._catalog.get("languages") or {}).items():
            self._languages[key] = LanguageTemplates(
                pools=block.get("pools") or {},
                micro=block.get("micro") or {},
                clarify=block.get("clarify", ""),
                emoji=block.get("emoji", ""),
                memory_reminder=block.get("memory_reminder", ""),
            )
        if self.default_language not in self._languages:
            raise ValueError(f"template catalog lacks default language {self.default_language!r}")

    @property
    def languages(self) -> List[str]:
        return sorted(self._languages)

    def for_language(self, language: str) -> LanguageTemplates:
        return self._languages.get(language) or self._languages[self.default_language]


def render(template: str, **values: str) -> str:
    """Substitute ``{key}`` placeholders without interpreting other braces."""
    out = template
    for key, value in values.items():
        out = out.replace("{" + key + "}", value)
    return out


__all__ = ["FALLBACK_GROUP", "LanguageTemplates", "TemplateCatalog", "load_template_catalog", "render"]
