"""
Conversation store: single writer of chat state.

Purpose
-------
Own the conversation map, the active pointer and the loading/error flags, and
run the append protocol that produces assistant replies, either from the
local :class:`ReasoningSynthesizer` (``append_message``) or from the backend's
live stream (``stream_reply``).

Concurrency
-----------
All mutations go through :meth:`ConversationStore._dispatch` on the event
loop thread. A user turn (commit, reply generation, reply commit) holds a
per-conversation ``asyncio.Lock`` so concurrent sends to the same
conversation are queued and answered in order. Different conversations run
concurrently. ``loading`` is true iff the active conversation has a turn in
flight.

Persistence
-----------
Whenever the conversation map changes it is written through the optional
:class:`ConversationSnapshotRepo`. Write failures are logged and otherwise
ignored; the store keeps working in memory.

Events
------
Published on the injected :class:`EventBus` (see ``base.events.channels``):
new/deleted messages, cleared conversations, language changes and
conversation lifecycle.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..agent import AgentState
from ..base.cancellation import CancellationToken
from ..base.clock import Clock, SystemClock
from ..base.errors import ErrorCode, InteractError, SynthesisError, TransportError, classify_exception
from ..base.events import EventBus, channels
from ..base.logging import LogContext, get_logger, log_event, normalized_log_event
from ..base.models import Conversation, Message, MessageMetadata
from ..base.streaming import StreamAccumulator
from ..client.chat_service import ChatService
from ..config import get_config
from ..config.defaults import (
    EPISODIC_EXCHANGE_MAX_CHARS,
    HYDRATED_CONVERSATION_TITLE,
    LOCAL_ID_PREFIX,
    NEW_CONVERSATION_TITLE,
    STREAM_GENERATED_BY,
)
from ..persistence.snapshot import ConversationSnapshotRepo
from ..synthesis import ReasoningSynthesizer
from .state import (
    Action,
    Add,
    Append,
    ChatState,
    DeleteMessage,
    Remove,
    Replace,
    SetActive,
    SetAll,
    SetError,
    SetLoading,
    Update,
    reduce,
)


def _local_id() -> str:
    return f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}"


def _clip(text: str, limit: int = EPISODIC_EXCHANGE_MAX_CHARS) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 1].rstrip() + "…"


def exchange_summary(user: Message, reply: Message) -> str:
    """One-line ``user → assistant`` recap of a turn, used as episodic memory text."""
    if not reply.content.strip():
        return _clip(user.content)
    return f"{_clip(user.content)} → {_clip(reply.content)}"


class ConversationStore:
    """Conversation state machine and reply orchestration."""

    def __init__(
        self,
        *,
        bus: EventBus,
        synthesizer: ReasoningSynthesizer,
        agent: Optional[AgentState] = None,
        snapshot_repo: Optional[ConversationSnapshotRepo] = None,
        chat_service: Optional[ChatService] = None,
        clock: Optional[Clock] = None,
        language: Optional[str] = None,
        id_factory: Callable[[], str] = _local_id,
    ) -> None:
        """Wire the store to its collaborators.

        Parameters
        ----------
        bus:
            Event bus the store publishes on.
        synthesizer:
            Local reply generator used by ``append_message``.
        agent:
            Persona and short-term memory; a default ``AgentState`` otherwise.
        snapshot_repo:
            Durable conversation map; ``None`` keeps state in memory only.
        chat_service:
            Backend collaborator for hydration, title sync and ``stream_reply``.
        language:
            App language used for new conversations; ``app.language`` config
            by default.
        id_factory:
            Conversation id generator.
        """
        self._bus = bus
        self._synthesizer = synthesizer
        self._clock = clock or SystemClock()
        self._agent = agent or AgentState(clock=self._clock)
        self._snapshots = snapshot_repo
        self._chat = chat_service
        self.language = language or get_config("app")["language"]
        self._new_id = id_factory
        self._state = ChatState()
        self._locks: Dict[str, asyncio.Lock] = {}
        self._in_flight: Dict[str, int] = {}
        self._logger = get_logger("interact.store")

    # ------------------------------------------------------------------
    # State access

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def agent(self) -> AgentState:
        return self._agent

    @property
    def conversations(self) -> Dict[str, Conversation]:
        return dict(self._state.conversations)

    @property
    def active_conversation_id(self) -> Optional[str]:
        return self._state.active_conversation_id

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    def get_conversation(self, conversation_id: Optional[str] = None) -> List[Message]:
        """Messages of ``conversation_id`` (or the active one) as a new list."""
        cid = conversation_id or self._state.active_conversation_id
        if not cid:
            return []
        conv = self._state.conversations.get(cid)
        return list(conv.messages) if conv is not None else []

    # ------------------------------------------------------------------
    # Dispatch, persistence, loading

    def _dispatch(self, action: Action) -> ChatState:
        previous = self._state
        self._state = reduce(previous, action)
        if self._state.conversations is not previous.conversations:
            self._persist()
        return self._state

    def _persist(self) -> None:
        if self._snapshots is None:
            return
        try:
            self._snapshots.save(self._state.conversations)
        except Exception as exc:
            log_event(
                self._logger,
                "store.persist_failed",
                LogContext(component="store"),
                level=logging.WARNING,
                error_code=ErrorCode.PERSISTENCE.value,
                error=repr(exc),
            )

    def _sync_loading(self) -> None:
        active = self._state.active_conversation_id
        self._dispatch(SetLoading(bool(active and self._in_flight.get(active))))

    def _begin_turn(self, conversation_id: str) -> None:
        self._in_flight[conversation_id] = self._in_flight.get(conversation_id, 0) + 1
        self._sync_loading()

    def _end_turn(self, conversation_id: str) -> None:
        remaining = self._in_flight.get(conversation_id, 0) - 1
        if remaining > 0:
            self._in_flight[conversation_id] = remaining
        else:
            self._in_flight.pop(conversation_id, None)
        self._sync_loading()

    def _lock_for(self, conversation_id: str) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = self._locks[conversation_id] = asyncio.Lock()
        return lock

    def is_in_flight(self, conversation_id: str) -> bool:
        return bool(self._in_flight.get(conversation_id))

    # ------------------------------------------------------------------
    # Hydration

    async def initialize(self) -> ChatState:
        """Hydrate from the durable store, else backend summaries, else a fresh local conversation.

        The first conversation of the resulting map becomes active.
        """
        source = "storage"
        conversations = self._load_snapshot()
        if not conversations:
            source = "backend"
            conversations = await self._fetch_summaries()
        if not conversations:
            source = "local"
            now = self._clock.now()
            fresh = Conversation(
                id=self._new_id(),
                title=NEW_CONVERSATION_TITLE,
                created_at=now,
                updated_at=now,
                language=self.language,
            )
            conversations = {fresh.id: fresh}
        self._dispatch(SetAll(conversations))
        self._dispatch(SetActive(next(iter(conversations))))
        self._sync_loading()
        log_event(
            self._logger,
            "store.hydrated",
            LogContext(component="store", conversation_id=self._state.active_conversation_id),
            source=source,
            conversations=len(conversations),
        )
        return self._state

    def _load_snapshot(self) -> Dict[str, Conversation]:
        if self._snapshots is None:
            return {}
        try:
            return self._snapshots.load()
        except Exception as exc:
            log_event(
                self._logger,
                "store.snapshot_unreadable",
                LogContext(component="store"),
                level=logging.WARNING,
                error_code=ErrorCode.PERSISTENCE.value,
                error=repr(exc),
            )
            return {}

    async def _fetch_summaries(self) -> Dict[str, Conversation]:
        if self._chat is None:
            return {}
        try:
            summaries = await self._chat.get_conversations()
        except InteractError as exc:
            log_event(
                self._logger,
                "store.summaries_unavailable",
                LogContext(component="store"),
                level=logging.WARNING,
                error_code=exc.code.value,
                error=exc.message,
            )
            return {}
        return {
            s.id: Conversation(
                id=s.id,
                title=s.title or HYDRATED_CONVERSATION_TITLE,
                created_at=s.last_message_at,
                updated_at=s.last_message_at,
                language=self.language,
            )
            for s in summaries
        }

    # ------------------------------------------------------------------
    # Conversations

    def create_conversation(
        self,
        conversation_id: Optional[str] = None,
        title: Optional[str] = None,
        language: Optional[str] = None,
    ) -> Conversation:
        """Add an empty conversation first in the map and make it active."""
        now = self._clock.now()
        conv = Conversation(
            id=conversation_id or self._new_id(),
            title=title or NEW_CONVERSATION_TITLE,
            created_at=now,
            updated_at=now,
            language=language or self.language,
        )
        self._dispatch(Add(conv))
        self.set_active_conversation(conv.id)
        self._bus.publish(channels.CONVERSATION_CREATED, {"conversation_id": conv.id})
        return conv

    async def update_conversation(self, conversation_id: str, patch: Mapping[str, Any]) -> Optional[Conversation]:
        """Shallow-merge ``patch``; a title change is pushed to the backend best-effort."""
        self._dispatch(Update(conversation_id, patch))
        conv = self._state.conversations.get(conversation_id)
        if conv is None:
            return None
        self._bus.publish(channels.CONVERSATION_UPDATED, {"conversation_id": conversation_id, "fields": sorted(patch)})
        title = patch.get("title")
        if title and self._chat is not None:
            try:
                await self._chat.update_conversation_title(conversation_id, title)
            except InteractError as exc:
                log_event(
                    self._logger,
                    "store.title_sync_failed",
                    LogContext(component="store", conversation_id=conversation_id),
                    level=logging.WARNING,
                    error_code=exc.code.value,
                    error=exc.message,
                )
        return conv

    async def remove_conversation(self, conversation_id: str, *, remote: bool = False) -> bool:
        """Delete a conversation locally (and on the backend when ``remote``).

        Returns ``False`` when the id was unknown. Clears the active pointer if
        it referenced the removed conversation.
        """
        if conversation_id not in self._state.conversations:
            return False
        if remote and self._chat is not None:
            await self._chat.delete_conversation(conversation_id)
        self._dispatch(Remove(conversation_id))
        if self._state.active_conversation_id == conversation_id:
            self.set_active_conversation(None)
        lock = self._locks.get(conversation_id)
        if lock is not None and not lock.locked():
            del self._locks[conversation_id]
        self._bus.publish(channels.CONVERSATION_REMOVED, {"conversation_id": conversation_id})
        return True

    def set_active_conversation(self, conversation_id: Optional[str] = None) -> None:
        """Point at ``conversation_id`` without validating it; ``None`` clears."""
        self._dispatch(SetActive(conversation_id))
        self._sync_loading()

    def clear_conversation(self, conversation_id: str) -> None:
        self._dispatch(Update(conversation_id, {"messages": ()}))
        self._bus.publish(channels.CLEAR_CONVERSATION, {"conversation_id": conversation_id})

    def set_conversation_language(self, conversation_id: str, language: str) -> None:
        self._dispatch(Update(conversation_id, {"language": language}))
        self._bus.publish(channels.LANGUAGE_CHANGED, {"conversation_id": conversation_id, "language": language})

    # ------------------------------------------------------------------
    # Messages

    def update_message(self, conversation_id: str, message_id: str, patch: Mapping[str, Any]) -> Optional[Message]:
        """Shallow-merge ``patch`` onto one message; ``None`` if either id is unknown."""
        conv = self._state.conversations.get(conversation_id)
        if conv is None:
            return None
        updated: Optional[Message] = None
        messages = []
        for m in conv.messages:
            if m.id == message_id:
                m = updated = m.patched(patch)
            messages.append(m)
        if updated is None:
            return None
        self._dispatch(Update(conversation_id, {"messages": messages}))
        return updated

    def delete_message(self, conversation_id: str, message_id: str) -> None:
        self._dispatch(DeleteMessage(conversation_id, message_id))
        self._bus.publish(channels.DELETE_MESSAGE, {"conversation_id": conversation_id, "message_id": message_id})

    def _stamp(self, conversation_id: str, message: Message) -> Message:
        changes: Dict[str, Any] = {}
        if message.conversation_id != conversation_id:
            changes["conversation_id"] = conversation_id
        if message.timestamp is None:
            changes["timestamp"] = self._clock.now()
        return message.patched(changes) if changes else message

    def _ensure_conversation(self, conversation_id: str, message: Message) -> None:
        if conversation_id in self._state.conversations:
            return
        now = self._clock.now()
        self._dispatch(
            Add(
                Conversation(
                    id=conversation_id,
                    title=HYDRATED_CONVERSATION_TITLE,
                    created_at=now,
                    updated_at=now,
                    language=message.language or self.language,
                )
            )
        )

    def _commit(self, conversation_id: str, message: Message) -> None:
        self._dispatch(Append(conversation_id, message))
        self._bus.publish(channels.NEW_MESSAGE, message)

    def _reply_language(self, conversation_id: str, message: Message) -> str:
        conv = self._state.conversations.get(conversation_id)
        return (conv.language if conv is not None else None) or message.language or self.language

    async def append_message(self, conversation_id: str, message: Message) -> Message:
        """Commit ``message``; for user messages, also generate and commit the reply.

        Returns the assistant reply for ``role == "user"`` and the committed
        message otherwise. On synthesis failure the user message stays
        committed, ``error`` is set and ``SynthesisError`` is raised.
        """
        message = self._stamp(conversation_id, message)
        if message.role != "user":
            self._ensure_conversation(conversation_id, message)
            self._commit(conversation_id, message)
            return message

        async with self._lock_for(conversation_id):
            self._ensure_conversation(conversation_id, message)
            self._dispatch(SetError(None))
            self._commit(conversation_id, message)
            self._begin_turn(conversation_id)
            ctx = LogContext(component="store", conversation_id=conversation_id, message_id=message.id)
            try:
                history = self.get_conversation(conversation_id)
                language = self._reply_language(conversation_id, message)
                memory = self._agent.memory_for(conversation_id)
                try:
                    reply = await self._synthesizer.synthesize(
                        self._agent.profile, conversation_id, history, language, memory
                    )
                except Exception as exc:
                    text = str(exc) or exc.__class__.__name__
                    self._dispatch(SetError(text))
                    normalized_log_event(
                        self._logger,
                        "store.reply",
                        ctx,
                        phase="synthesize",
                        emitted=False,
                        error_code=ErrorCode.SYNTHESIS.value,
                        level=logging.ERROR,
                        error=repr(exc),
                    )
                    raise SynthesisError(text, conversation_id=conversation_id, raw=exc) from exc
                reply = self._stamp(conversation_id, reply)
                self._commit(conversation_id, reply)
                self._record_exchange(conversation_id, message, reply)
                normalized_log_event(
                    self._logger,
                    "store.reply",
                    ctx,
                    phase="finalize",
                    emitted=True,
                    source="synthesizer",
                    reply_id=reply.id,
                )
                return reply
            finally:
                self._end_turn(conversation_id)

    async def stream_reply(
        self,
        conversation_id: str,
        message: Message,
        cancel: Optional[CancellationToken] = None,
    ) -> Message:
        """Commit ``message`` and stream the backend's reply into the conversation.

        The reply is appended as an empty placeholder, grown with each delta
        through :meth:`update_message`, then finalized with ``Replace``. On
        failure an empty placeholder is removed (partial text is kept), ``error``
        is set and ``TransportError`` (or ``AuthError``) is raised. A cancelled
        stream keeps whatever text arrived; if none did, ``CancelledError`` is
        raised. Task cancellation (an ``asyncio.wait_for`` timeout) gets the
        same placeholder cleanup and ``error`` before it propagates.
        """
        if self._chat is None:
            raise InteractError(
                ErrorCode.UNAVAILABLE, "no backend configured for streaming", component="store"
            )
        message = self._stamp(conversation_id, message)
        async with self._lock_for(conversation_id):
            self._ensure_conversation(conversation_id, message)
            self._dispatch(SetError(None))
            self._commit(conversation_id, message)
            self._begin_turn(conversation_id)
            placeholder = Message(
                id=f"stream-{uuid.uuid4().hex}",
                role="assistant",
                content="",
                conversation_id=conversation_id,
                timestamp=self._clock.now(),
                language=self._reply_language(conversation_id, message),
                metadata=MessageMetadata(generated_by=STREAM_GENERATED_BY, streaming=True),
            )
            self._dispatch(Append(conversation_id, placeholder))
            ctx = LogContext(component="store", conversation_id=conversation_id, message_id=placeholder.id)
            acc = StreamAccumulator()
            try:
                events = self._chat.stream_events(conversation_id, message.content, cancel=cancel)
                try:
                    async for event in events:
                        if acc.feed(event):
                            self.update_message(conversation_id, placeholder.id, {"content": acc.text})
                        if acc.error is not None:
                            raise TransportError(acc.error, conversation_id=conversation_id)
                except InteractError as exc:
                    self._fail_stream(conversation_id, placeholder, acc.text, exc.message, exc.code, ctx)
                    raise
                except BaseException as exc:
                    if isinstance(exc, asyncio.CancelledError):
                        reason = "reply stream cancelled"
                    else:
                        reason = str(exc) or exc.__class__.__name__
                    self._fail_stream(conversation_id, placeholder, acc.text, reason, classify_exception(exc), ctx)
                    raise
                finally:
                    await events.aclose()
                text = acc.text
                if cancel is not None and cancel.cancelled and not text:
                    self._dispatch(DeleteMessage(conversation_id, placeholder.id))
                    cancel.raise_if_cancelled()
                final = placeholder.patched(
                    {
                        "id": acc.message_id or placeholder.id,
                        "content": text,
                        "timestamp": self._clock.now(),
                        "metadata": MessageMetadata(
                            generated_by=STREAM_GENERATED_BY,
                            language=placeholder.language,
                            streaming=False,
                            extra=acc.metadata,
                        ),
                    }
                )
                self._dispatch(Replace(conversation_id, placeholder.id, final))
                self._bus.publish(channels.NEW_MESSAGE, final)
                self._record_exchange(conversation_id, message, final)
                normalized_log_event(
                    self._logger,
                    "store.reply",
                    ctx,
                    phase="finalize",
                    emitted=bool(text),
                    source="stream",
                    reply_id=final.id,
                    cancelled=bool(cancel and cancel.cancelled) or None,
                )
                return final
            finally:
                self._end_turn(conversation_id)

    def _fail_stream(
        self,
        conversation_id: str,
        placeholder: Message,
        text: str,
        error: str,
        code: ErrorCode,
        ctx: LogContext,
    ) -> None:
        if text:
            self.update_message(
                conversation_id,
                placeholder.id,
                {"metadata": MessageMetadata(generated_by=STREAM_GENERATED_BY, streaming=False)},
            )
        else:
            self._dispatch(DeleteMessage(conversation_id, placeholder.id))
        self._dispatch(SetError(error))
        normalized_log_event(
            self._logger,
            "store.reply",
            ctx,
            phase="stream",
            emitted=bool(text),
            error_code=code.value,
            level=logging.ERROR,
            error=error,
        )

    def _record_exchange(self, conversation_id: str, user: Message, reply: Message) -> None:
        self._agent.add_episodic_memory(
            exchange_summary(user, reply),
            conversation_id=conversation_id,
            metadata={
                "user_message_id": user.id,
                "assistant_message_id": reply.id,
                "assistant": reply.content,
            },
            timestamp=reply.timestamp,
        )


__all__ = ["ConversationStore", "exchange_summary"]
