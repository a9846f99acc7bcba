"""
Per-request stage timing for the completion log line.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator


@dataclass
class StageTimers:
    """
    Wall-clock milliseconds spent in each named stage of one request.

    A stage entered twice accumulates. `started` marks the beginning of
    the request as a whole.
    """

    started: float = field(default_factory=time.perf_counter)
    stages_ms: Dict[str, float] = field(default_factory=dict)

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        begin = time.perf_counter()
        try:
            yield
        finally:
            spent = (time.perf_counter() - begin) * 1000
            self.stages_ms[name] = self.stages_ms.get(name, 0.0) + spent

    def elapsed_ms(self) -> float:
        return round((time.perf_counter() - self.started) * 1000, 1)

    def telemetry(self) -> Dict[str, Any]:
        """`duration_ms` and `timings_ms` fields for structured logs."""
        return {
            "duration_ms": self.elapsed_ms(),
            "timings_ms": {name: round(ms, 1) for name, ms in self.stages_ms.items()},
        }
