"""
Per-stage wall-clock timings for one extraction call.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Dict, Iterator


class StageTimers:
    """
    Accumulate elapsed time per logical stage name.

    Use `timer(name)` as a context manager around stage blocks;
    each exit adds the elapsed milliseconds to `totals_ms[name]`,
    whether the block succeeded or raised.
    """

    def __init__(self) -> None:
        self.totals_ms: Dict[str, float] = {}

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        start_time = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            self.totals_ms[name] = self.totals_ms.get(name, 0.0) + elapsed_ms
