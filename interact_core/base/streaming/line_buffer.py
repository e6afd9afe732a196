"""Newline reassembly shared by the NDJSON and SSE decoders.

Chunks may split anywhere, including inside a multi-byte UTF-8 sequence.
``feed`` returns only the lines completed by the chunk; the trailing fragment
is retained until more data arrives or ``flush`` is called.
"""
from __future__ import annotations

import codecs
from typing import List, Union

Chunk = Union[str, bytes, bytearray]


class LineBuffer:
    """Stateful line splitter over str or bytes chunks.

    A trailing ``\\r`` is removed from each completed line so CRLF streams
    behave like LF streams.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received after the last newline."""
        return self._buffer

    def feed(self, chunk: Chunk) -> List[str]:
        if isinstance(chunk, (bytes, bytearray)):
            text = self._decoder.decode(bytes(chunk))
        else:
            text = chunk
        if not text:
            return []
        self._buffer += text
        *complete, self._buffer = self._buffer.split("\n")
        return [line[:-1] if line.endswith("\r") else line for line in complete]

    def flush(self) -> str:
        """Return and clear the remaining fragment, including undecoded bytes."""
        rest = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        return rest


__all__ = ["LineBuffer", "Chunk"]
