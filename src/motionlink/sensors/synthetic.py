"""Synthetic tri-axial sinusoid generator for demos and tests."""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Iterator, Tuple

from ..core.models import Sample
from .source import PostFn, ThreadedSource

NS_PER_SECOND = 1_000_000_000

Triple = Tuple[float, float, float]


@dataclass
class SyntheticSignal:
    """
    Per-axis ``offset + amplitude * sin(2*pi*frequency*t)``.

    The default models a device lying on its back (gravity on Z) with a
    4 Hz oscillation on X.
    """

    rate_hz: float = 100.0
    frequencies_hz: Triple = (4.0, 0.0, 0.0)
    amplitudes: Triple = (1.0, 0.0, 0.0)
    offsets: Triple = (0.0, 0.0, 9.81)
    start_ns: int = 0

    def __post_init__(self) -> None:
        if self.rate_hz <= 0:
            raise ValueError(f"rate_hz must be > 0, got {self.rate_hz}")

    @property
    def period_ns(self) -> int:
        return int(round(NS_PER_SECOND / float(self.rate_hz)))

    def sample_at(self, index: int) -> Sample:
        t_ns = self.start_ns + index * self.period_ns
        t_s = (t_ns - self.start_ns) / NS_PER_SECOND
        values = [
            offset + amp * math.sin(2.0 * math.pi * freq * t_s)
            for freq, amp, offset in zip(self.frequencies_hz, self.amplitudes, self.offsets)
        ]
        return Sample(x=values[0], y=values[1], z=values[2], timestamp=t_ns)

    def samples(self, count: int | None = None) -> Iterator[Sample]:
        """Yield ``count`` samples (endless when ``count`` is None)."""
        index = 0
        while count is None or index < count:
            yield self.sample_at(index)
            index += 1


class SyntheticSource(ThreadedSource):
    """Post :class:`SyntheticSignal` samples paced at ``signal.rate_hz``."""

    thread_name = "synthetic-source"

    def __init__(self, signal: SyntheticSignal, post: PostFn) -> None:
        super().__init__(post)
        self.signal = signal

    def _produce(self, stop_event: threading.Event) -> None:
        period_s = 1.0 / float(self.signal.rate_hz)
        for sample in self.signal.samples():
            if not self._emit(sample, stop_event):
                return
            if stop_event.wait(period_s):
                return
