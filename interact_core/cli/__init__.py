"""``interact-chat`` command-line entry point."""

from __future__ import annotations

from typing import List, Optional

from ..base.errors import InteractError
from .cli_actions import apply_logging, run_chat, run_conversations
from .cli_parser import build_parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    apply_logging(args.log_level)
    try:
        if args.cmd == "conversations":
            return run_conversations(args)
        return run_chat(args)
    except InteractError as exc:
        print(f"error: {exc.message}")
        return 1


__all__ = ["main"]
