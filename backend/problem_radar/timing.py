"""
Timing Utilities for Latency Instrumentation

Provides a step timer for logging execution times of the stages of a
research request and for reporting the total processing time.
"""

import logging
import time
from contextlib import contextmanager
from typing import Optional

logger = logging.getLogger(__name__)


def log_timing(stage: str, action: str, duration_ms: Optional[float] = None):
    """Log a timing event in standard format."""
    if duration_ms is not None:
        logger.info("[TIMING] %s: %s — duration=%.0fms", stage, action, duration_ms)
    else:
        logger.info("[TIMING] %s: %s", stage, action)


class StepTimer:
    """
    Utility class for timing multiple steps within one request.

    Usage:
        timer = StepTimer("research")
        with timer.step("parse"):
            parse()
        with timer.step("cluster"):
            cluster()
        timer.summary()
    """

    def __init__(self, stage: str):
        self.stage = stage
        self.steps: dict[str, float] = {}
        self.start_time = time.perf_counter()

    @contextmanager
    def step(self, step_name: str):
        """Time a single step (sync or async body)."""
        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.steps[step_name] = duration_ms
            log_timing(self.stage, step_name, duration_ms)

    def elapsed_ms(self) -> int:
        """Milliseconds since the timer was created."""
        return int((time.perf_counter() - self.start_time) * 1000)

    def summary(self) -> int:
        """Log the per-step breakdown and return the total elapsed time."""
        total_ms = self.elapsed_ms()
        breakdown = ", ".join(f"{name}={ms:.0f}ms" for name, ms in self.steps.items())
        log_timing(self.stage, f"TOTAL [{breakdown}]" if breakdown else "TOTAL", total_ms)
        return total_ms
