"""Argument parser for ``interact-chat``.

Wires argument shapes only; handlers live in ``cli_actions``.
"""

from __future__ import annotations

import argparse


def build_parser() -> argparse.ArgumentParser:
    """Top-level parser with ``chat`` and ``conversations`` subcommands."""
    p = argparse.ArgumentParser(prog="interact-chat", description="INTERACT conversation shell")
    p.add_argument("--db", default=None, help="SQLite file for local state (storage.db_path by default)")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    # chat options when no subcommand is given
    p.set_defaults(language=None, backend=False, api_url=None, seed=None, fast=False)
    sub = p.add_subparsers(dest="cmd")

    p_chat = sub.add_parser("chat", help="Interactive chat (default)")
    p_chat.add_argument("--language", default=None, help="Language for new conversations (en/fr)")
    p_chat.add_argument("--backend", action="store_true", help="Stream replies from the backend")
    p_chat.add_argument("--api-url", default=None, help="Backend base URL (api.base_url by default)")
    p_chat.add_argument("--seed", type=int, default=None, help="Seed for reproducible local replies")
    p_chat.add_argument("--fast", action="store_true", help="Skip the simulated reply latency")

    p_list = sub.add_parser("conversations", help="List stored conversations")
    p_list.add_argument("--json", action="store_true")

    return p


__all__ = ["build_parser"]
