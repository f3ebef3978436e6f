"""
Stage timings for ``--timings``.

``timed_stage`` wraps one pipeline stage; when enabled it records the
elapsed time on a TimingLog and logs it.
"""
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Generator, Optional

logger = logging.getLogger(__name__)


@dataclass
class TimingLog:
    """Stage name -> duration in seconds, in the order stages ran."""
    stages: Dict[str, float] = field(default_factory=dict)

    def log_stage(self, stage: str, duration: float) -> None:
        self.stages[stage] = duration

    def total(self) -> float:
        return sum(self.stages.values())

    def summary(self) -> str:
        parts = [f"{name}={secs:.3f}s" for name, secs in self.stages.items()]
        return f"total={self.total():.3f}s ({', '.join(parts)})"


@contextmanager
def timed_stage(
    stage: str,
    enabled: bool = False,
    timing_log: Optional[TimingLog] = None,
) -> Generator[None, None, None]:
    if not enabled:
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        if timing_log is not None:
            timing_log.log_stage(stage, duration)
        logger.info("%s completed in %.3fs", stage, duration)
