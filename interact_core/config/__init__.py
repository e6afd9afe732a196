"""Layered configuration for the conversation layer.

Merge order (later wins):
    1. Built-in defaults (``interact_core.config.defaults``)
    2. Optional external file pointed to by ``INTERACT_CONFIG_FILE``
       (JSON first, YAML otherwise)
    3. Environment variables (see ``ENV_FIELD_MAP``)
    4. In-code overrides passed to :func:`get_config`

A ``.env`` file (path from ``DOTENV_FILE``, default ``.env``) is read once
before environment lookups; it never clobbers variables already set.

External file example::

    api:
      base_url: https://interact.example.com/api
    synthesis:
      emoji_probability: 0.0
      latency_max_ms: 400
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from . import defaults

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "api": {
        "base_url": defaults.API_DEFAULT_BASE_URL,
        "timeout_seconds": defaults.API_DEFAULT_TIMEOUT_SECONDS,
    },
    "storage": {
        "db_path": defaults.SQLITE_DEFAULT_PATH,
        "namespace": defaults.STORAGE_NAMESPACE,
    },
    "synthesis": {
        "emoji_probability": defaults.SYNTH_EMOJI_PROBABILITY,
        "memory_recall_probability": defaults.SYNTH_MEMORY_RECALL_PROBABILITY,
        "memory_recall_window": defaults.SYNTH_MEMORY_RECALL_WINDOW,
        "latency_min_ms": defaults.SYNTH_LATENCY_MIN_MS,
        "latency_max_ms": defaults.SYNTH_LATENCY_MAX_MS,
    },
    "app": {"language": defaults.DEFAULT_APP_LANGUAGE},
}

# (section, field) -> environment variable
ENV_FIELD_MAP: Dict[tuple, str] = {
    ("api", "base_url"): "INTERACT_API_URL",
    ("api", "timeout_seconds"): "INTERACT_API_TIMEOUT",
    ("storage", "db_path"): "INTERACT_DB_PATH",
    ("storage", "namespace"): "INTERACT_STORAGE_NAMESPACE",
    ("synthesis", "emoji_probability"): "INTERACT_SYNTH_EMOJI_PROBABILITY",
    ("synthesis", "memory_recall_probability"): "INTERACT_SYNTH_MEMORY_PROBABILITY",
    ("synthesis", "latency_min_ms"): "INTERACT_SYNTH_LATENCY_MIN_MS",
    ("synthesis", "latency_max_ms"): "INTERACT_SYNTH_LATENCY_MAX_MS",
    ("app", "language"): "INTERACT_LANGUAGE",
}

_FILE_CACHE: Optional[Dict[str, Any]] = None
_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Read KEY=VALUE lines from the dotenv file once per process."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    _DOTENV_LOADED = True
    if not os.path.isfile(path):
        return
    with open(path, "r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            k, v = line.split("=", 1)
            k = k.strip()
            if k and k not in os.environ:
                os.environ[k] = v.strip().strip('"').strip("'")


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv("INTERACT_CONFIG_FILE")
    data: Any = {}
    if path and Path(path).exists():
        text = Path(path).read_text(encoding="utf-8")
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            try:
                data = yaml.safe_load(text) or {}
            except yaml.YAMLError:
                data = {}
    _FILE_CACHE = data if isinstance(data, dict) else {}
    return _FILE_CACHE


def _coerce(value: str, like: Any) -> Any:
    """Coerce an env string to the type of the default it overrides."""
    if isinstance(like, bool):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    if isinstance(like, int):
        return int(value)
    if isinstance(like, float):
        return float(value)
    return value


def _env_overrides(section: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    base = DEFAULTS.get(section, {})
    for (sec, fld), env_name in ENV_FIELD_MAP.items():
        if sec != section:
            continue
        val = os.getenv(env_name)
        if val is None or not val.strip():
            continue
        try:
            out[fld] = _coerce(val, base.get(fld))
        except ValueError:
            continue
    return out


def get_config(section: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for ``section``.

    Merge order (later wins): defaults -> external file -> env vars -> overrides.
    ``None`` values in ``overrides`` are ignored.
    """
    _load_dotenv_once()
    name = (section or "").lower().strip()
    cfg: Dict[str, Any] = dict(DEFAULTS.get(name, {}))

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= _env_overrides(name)

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}
    return cfg


def reset_config_cache() -> None:
    """Forget the cached external file (tests flip ``INTERACT_CONFIG_FILE``)."""
    global _FILE_CACHE
    _FILE_CACHE = None


__all__ = ["get_config", "reset_config_cache", "DEFAULTS", "ENV_FIELD_MAP"]
