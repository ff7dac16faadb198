"""Opt-in debug instrumentation controlled by ``MOTIONLINK_DEBUG``."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def debug_enabled() -> bool:
    """Return True when lightweight instrumentation should run."""
    return os.getenv("MOTIONLINK_DEBUG", "").lower() in _TRUTHY


class TimingStats:
    """
    Running mean of how long a hot path takes.

    Logs the average every ``report_every`` measurements at INFO so it shows
    up without turning on DEBUG for the whole package.
    """

    def __init__(self, label: str, *, report_every: int = 1000) -> None:
        self.label = label
        self.report_every = max(1, int(report_every))
        self.count = 0
        self.total_s = 0.0

    @property
    def mean_us(self) -> float:
        return (self.total_s / self.count) * 1e6 if self.count else 0.0

    def add(self, elapsed_s: float) -> None:
        self.count += 1
        self.total_s += elapsed_s
        if self.count % self.report_every == 0:
            logger.info("%s avg %.1f us over %d calls", self.label, self.mean_us, self.count)

    def reset(self) -> None:
        self.count = 0
        self.total_s = 0.0


@contextmanager
def time_block(
    label: str,
    *,
    emitter: Callable[[str], None] | None = None,
    stats: Optional[TimingStats] = None,
) -> Iterator[None]:
    """
    Measure the ``with`` body when debugging is enabled.

    Each run is either accumulated into ``stats`` or reported on its own
    through ``emitter`` (default: this module's logger at DEBUG).
    """
    if not debug_enabled():
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if stats is not None:
            stats.add(elapsed)
        else:
            message = f"{label} took {elapsed * 1000.0:.3f} ms"
            if emitter is None:
                logger.debug(message)
            else:
                emitter(message)
