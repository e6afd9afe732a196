"""Incremental response decoders.

Two strategies turn a chunked transport into discrete values:

* NDJSON: every complete, non-blank line is parsed as JSON. Lines that fail to
  parse are dropped and the stream continues. At end of stream, a non-empty
  remainder gets one last parse attempt.
* SSE: lines starting with ``data: `` yield the rest of the line verbatim;
  every other line is discarded, as is an unterminated trailing fragment.

Each strategy is a small stateful class (``feed``/``finish``) driven by the
sync (``iter_*``) or async (``aiter_*``) generator wrappers. The wrappers are
forward-only; abandoning them early simply drops buffered data. The transport
that produced the chunks is responsible for its own release. When a
``CancellationToken`` is supplied and gets cancelled, no further value is
yielded, buffered or not.
"""
from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Iterable, Iterator, List, Optional, Protocol

from ...config.defaults import SSE_DATA_PREFIX
from ..cancellation import CancellationToken
from ..errors import ErrorCode
from ..logging import LogContext, get_logger, log_event
from .line_buffer import Chunk, LineBuffer

_logger = get_logger("interact.decoder")


class _Skip:
    __slots__ = ()


_SKIP = _Skip()


class FrameDecoder(Protocol):
    def feed(self, chunk: Chunk) -> List[Any]:  # pragma: no cover - interface
        ...

    def finish(self) -> List[Any]:  # pragma: no cover - interface
        ...


class NdjsonDecoder:
    """Newline-delimited JSON reassembly."""

    def __init__(self) -> None:
        self._lines = LineBuffer()
        self.dropped = 0

    def feed(self, chunk: Chunk) -> List[Any]:
        return [v for v in map(self._parse, self._lines.feed(chunk)) if v is not _SKIP]

    def finish(self) -> List[Any]:
        value = self._parse(self._lines.flush())
        return [] if value is _SKIP else [value]

    def _parse(self, line: str) -> Any:
        text = line.strip()
        if not text:
            return _SKIP
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            self.dropped += 1
            log_event(
                _logger,
                "decoder.frame_dropped",
                LogContext(component="decoder"),
                level=logging.DEBUG,
                mode="ndjson",
                error_code=ErrorCode.MALFORMED_FRAME.value,
                error=str(exc),
                size=len(text),
            )
            return _SKIP


class SseDecoder:
    """Server-sent-event ``data:`` line extraction."""

    def __init__(self, prefix: str = SSE_DATA_PREFIX) -> None:
        self._lines = LineBuffer()
        self._prefix = prefix

    def feed(self, chunk: Chunk) -> List[str]:
        n = len(self._prefix)
        return [line[n:] for line in self._lines.feed(chunk) if line.startswith(self._prefix)]

    def finish(self) -> List[str]:
        self._lines.flush()
        return []


def _drain(values: List[Any], cancel: Optional[CancellationToken]) -> Iterator[Any]:
    for value in values:
        if cancel is not None and cancel.cancelled:
            return
        yield value


def _decode(decoder: FrameDecoder, chunks: Iterable[Chunk], cancel: Optional[CancellationToken]) -> Iterator[Any]:
    for chunk in chunks:
        if cancel is not None and cancel.cancelled:
            return
        yield from _drain(decoder.feed(chunk), cancel)
    if cancel is not None and cancel.cancelled:
        return
    yield from _drain(decoder.finish(), cancel)


async def _adecode(
    decoder: FrameDecoder, chunks: AsyncIterable[Chunk], cancel: Optional[CancellationToken]
) -> AsyncIterator[Any]:
    async for chunk in chunks:
        if cancel is not None and cancel.cancelled:
            return
        for value in _drain(decoder.feed(chunk), cancel):
            yield value
    if cancel is not None and cancel.cancelled:
        return
    for value in _drain(decoder.finish(), cancel):
        yield value


def iter_ndjson(chunks: Iterable[Chunk], *, cancel: Optional[CancellationToken] = None) -> Iterator[Any]:
    """Yield parsed JSON values from a synchronous chunk iterable."""
    return _decode(NdjsonDecoder(), chunks, cancel)


def iter_sse(chunks: Iterable[Chunk], *, cancel: Optional[CancellationToken] = None) -> Iterator[str]:
    """Yield SSE ``data:`` payloads from a synchronous chunk iterable."""
    return _decode(SseDecoder(), chunks, cancel)


def aiter_ndjson(chunks: AsyncIterable[Chunk], *, cancel: Optional[CancellationToken] = None) -> AsyncIterator[Any]:
    """Async counterpart of :func:`iter_ndjson`; suspends only on the next chunk."""
    return _adecode(NdjsonDecoder(), chunks, cancel)


def aiter_sse(chunks: AsyncIterable[Chunk], *, cancel: Optional[CancellationToken] = None) -> AsyncIterator[str]:
    """Async counterpart of :func:`iter_sse`."""
    return _adecode(SseDecoder(), chunks, cancel)


__all__ = [
    "FrameDecoder",
    "NdjsonDecoder",
    "SseDecoder",
    "iter_ndjson",
    "iter_sse",
    "aiter_ndjson",
    "aiter_sse",
]
