"""Layered configuration: defaults, external file, environment, overrides."""

from __future__ import annotations

import json

from interact_core.config import get_config, reset_config_cache
from interact_core.config import defaults


def test_defaults_when_nothing_is_set():
    cfg = get_config("synthesis")
    assert cfg["emoji_probability"] == defaults.SYNTH_EMOJI_PROBABILITY  # nosec B101
    assert get_config("app")["language"] == "fr"  # nosec B101
    assert get_config("unknown-section") == {}  # nosec B101


def test_yaml_file_then_env_then_overrides(tmp_path, monkeypatch):
    path = tmp_path / "interact.yaml"
    path.write_text(
        "api:\n  base_url: https://file.example/api\n  timeout_seconds: 5\nsynthesis:\n  latency_max_ms: 400\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("INTERACT_CONFIG_FILE", str(path))
    reset_config_cache()

    assert get_config("api")["base_url"] == "https://file.example/api"  # nosec B101
    assert get_config("synthesis")["latency_max_ms"] == 400  # nosec B101

    monkeypatch.setenv("INTERACT_API_URL", "https://env.example/api")
    monkeypatch.setenv("INTERACT_API_TIMEOUT", "2.5")
    cfg = get_config("api")
    assert cfg["base_url"] == "https://env.example/api"  # nosec B101
    assert cfg["timeout_seconds"] == 2.5  # nosec B101

    cfg = get_config("api", {"base_url": "https://override/api", "timeout_seconds": None})
    assert cfg["base_url"] == "https://override/api"  # nosec B101
    assert cfg["timeout_seconds"] == 2.5  # nosec B101


def test_json_file_is_accepted(tmp_path, monkeypatch):
    path = tmp_path / "interact.json"
    path.write_text(json.dumps({"app": {"language": "en"}}), encoding="utf-8")
    monkeypatch.setenv("INTERACT_CONFIG_FILE", str(path))
    reset_config_cache()
    assert get_config("app")["language"] == "en"  # nosec B101


def test_unparseable_env_value_is_ignored(monkeypatch):
    monkeypatch.setenv("INTERACT_SYNTH_EMOJI_PROBABILITY", "often")
    assert get_config("synthesis")["emoji_probability"] == defaults.SYNTH_EMOJI_PROBABILITY  # nosec B101
