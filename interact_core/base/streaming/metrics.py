"""Timing metrics collected while consuming a streamed reply."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional


@dataclass
class StreamMetrics:
    """Emitted-delta count, time to first delta and total duration (ms)."""

    emitted: int = 0
    time_to_first_delta_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    _clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    _started: float = field(default=0.0, repr=False)

    def start(self) -> None:
        self._started = self._clock()

    def record_delta(self) -> None:
        if self.emitted == 0:
            self.time_to_first_delta_ms = (self._clock() - self._started) * 1000.0
        self.emitted += 1

    def finish(self) -> None:
        self.total_duration_ms = (self._clock() - self._started) * 1000.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "emitted": self.emitted,
            "time_to_first_delta_ms": self.time_to_first_delta_ms,
            "total_duration_ms": self.total_duration_ms,
        }


__all__ = ["StreamMetrics"]
