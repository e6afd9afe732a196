"""Streaming package: incremental decoders, stream events and metrics."""

from .decoders import NdjsonDecoder, SseDecoder, aiter_ndjson, aiter_sse, iter_ndjson, iter_sse
from .events import ChatStreamEvent, StreamAccumulator, event_from_frame
from .line_buffer import LineBuffer
from .metrics import StreamMetrics

__all__ = [
    "LineBuffer",
    "NdjsonDecoder",
    "SseDecoder",
    "iter_ndjson",
    "iter_sse",
    "aiter_ndjson",
    "aiter_sse",
    "ChatStreamEvent",
    "StreamAccumulator",
    "event_from_frame",
    "StreamMetrics",
]
