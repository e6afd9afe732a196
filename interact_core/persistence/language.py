"""UI language preference (``en`` / ``fr``) persisted under ``language``.

When nothing valid is stored, the preference is detected from a locale
string: French locales map to ``fr``, everything else to ``en``.
"""

from __future__ import annotations

import os
from typing import Optional

from ..config.defaults import LANGUAGE_KEY, SUPPORTED_UI_LANGUAGES
from .interfaces import IKeyValueStore

_LOCALE_ENV_VARS = ("LC_ALL", "LC_MESSAGES", "LANG")


def detect_language(locale: Optional[str] = None) -> str:
    """Map a locale such as ``fr_FR.UTF-8`` to ``fr``; anything else is ``en``.

    Without an explicit ``locale`` the usual environment variables are read.
    """
    if locale is None:
        locale = next((os.environ[v] for v in _LOCALE_ENV_VARS if os.environ.get(v)), "")
    return "fr" if locale.strip().lower().startswith("fr") else "en"


class LanguagePreference:
    def __init__(self, store: IKeyValueStore, key: str = LANGUAGE_KEY) -> None:
        self.store = store
        self.key = key

    def get(self, locale: Optional[str] = None) -> str:
        saved = self.store.get(self.key)
        if saved in SUPPORTED_UI_LANGUAGES:
            return saved
        return detect_language(locale)

    def set(self, language: str) -> str:
        if language not in SUPPORTED_UI_LANGUAGES:
            raise ValueError(f"unsupported UI language {language!r}; expected one of {SUPPORTED_UI_LANGUAGES}")
        self.store.set(self.key, language)
        return language


__all__ = ["LanguagePreference", "detect_language"]
