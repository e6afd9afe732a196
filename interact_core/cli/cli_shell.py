"""Interactive chat shell over a :class:`ConversationStore`.

Plain lines are sent as user messages to the active conversation. Commands:

- ``/help``: list commands
- ``/new [title]``: start a conversation and switch to it
- ``/list``: list conversations (``*`` marks the active one)
- ``/use <id>``: switch conversation
- ``/lang <code>``: set the active conversation's language
- ``/title <text>``: rename the active conversation
- ``/clear``: empty the active conversation
- ``/history``: print the active conversation
- ``/quit``: leave
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Callable, Optional

from ..base.errors import InteractError
from ..base.models import Message
from ..store import ConversationStore

Printer = Callable[[str], None]

HELP = __doc__.split("\n\n", 1)[1].strip()


def _readline(prompt: str) -> str:
    """Read one line; EOF means quit."""
    try:
        return input(prompt)
    except EOFError:
        return "/quit"


class ChatShell:
    """Line-oriented front end; ``stream`` selects backend streaming over local synthesis."""

    def __init__(self, store: ConversationStore, *, stream: bool = False, out: Printer = print) -> None:
        self.store = store
        self.stream = stream
        self.out = out

    def _active(self) -> str:
        cid = self.store.active_conversation_id
        if cid is None or cid not in self.store.conversations:
            cid = self.store.create_conversation().id
        return cid

    async def send(self, text: str) -> Optional[Message]:
        cid = self._active()
        message = Message(id=f"user-{uuid.uuid4().hex}", role="user", content=text)
        try:
            if self.stream:
                reply = await self.store.stream_reply(cid, message)
            else:
                reply = await self.store.append_message(cid, message)
        except InteractError as exc:
            self.out(f"! {exc.message}")
            return None
        self.out(reply.content)
        return reply

    async def handle(self, line: str) -> bool:
        """Process one input line; ``False`` ends the session."""
        text = line.strip()
        if not text:
            return True
        if not text.startswith("/"):
            await self.send(text)
            return True
        cmd, _, arg = text[1:].partition(" ")
        arg = arg.strip()
        if cmd in {"quit", "exit"}:
            return False
        if cmd == "help":
            self.out(HELP)
        elif cmd == "new":
            conv = self.store.create_conversation(title=arg or None)
            self.out(f"+ {conv.id} {conv.title}")
        elif cmd == "list":
            self._list()
        elif cmd == "use":
            if arg not in self.store.conversations:
                self.out(f"! unknown conversation {arg!r}")
            else:
                self.store.set_active_conversation(arg)
        elif cmd == "lang" and arg:
            self.store.set_conversation_language(self._active(), arg)
        elif cmd == "title" and arg:
            await self.store.update_conversation(self._active(), {"title": arg})
        elif cmd == "clear":
            self.store.clear_conversation(self._active())
        elif cmd == "history":
            for m in self.store.get_conversation(self._active()):
                self.out(f"[{m.role}] {m.content}")
        else:
            self.out(f"! unknown command /{cmd} (try /help)")
        return True

    def _list(self) -> None:
        active = self.store.active_conversation_id
        for cid, conv in self.store.conversations.items():
            mark = "*" if cid == active else " "
            self.out(f"{mark} {cid}  {conv.title or '-'}  ({len(conv.messages)} messages)")

    async def run(self, read: Callable[[str], str] = _readline) -> None:
        self.out("INTERACT shell. /help for commands.")
        while True:
            line = await asyncio.to_thread(read, "you> ")
            if not await self.handle(line):
                break


__all__ = ["ChatShell", "HELP"]
