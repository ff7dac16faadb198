"""Drive the window -> spectrum -> features -> link pipeline, one sample at a time."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ..analysis.features import FeatureClassifier
from ..analysis.spectral import DEFAULT_SECONDS_PER_TICK, SpectralAnalyzer
from ..errors import DegenerateWindowError, NotConnectedError
from ..tools.debug import time_block
from .models import FeatureRecord, Sample, WindowStatus, is_finite_record
from .window import DEFAULT_WINDOW_SIZE, SampleWindow

logger = logging.getLogger(__name__)


class RecordLink(Protocol):
    """Anything with the ``send`` contract of :class:`~motionlink.remote.LinkSession`."""

    def send(self, data: bytes) -> None:  # pragma: no cover - protocol
        ...


class SampleSink(Protocol):
    """Optional raw sample recorder (see :mod:`motionlink.dataio`)."""

    def write_sample(self, sample: Sample) -> None:  # pragma: no cover - protocol
        ...


@dataclass
class ControllerStats:
    samples: int = 0
    windows: int = 0
    records_sent: int = 0
    records_dropped: int = 0
    degenerate_windows: int = 0


class SamplingController:
    """
    Own the sample window and turn every full window into one sent record.

    Link availability never stalls sampling: a record produced while the
    link is not connected is dropped, and a window spanning zero time is
    skipped. In both cases the window is reset and the next sample starts
    a new one.
    """

    def __init__(
        self,
        link: RecordLink,
        *,
        window_size: int = DEFAULT_WINDOW_SIZE,
        seconds_per_tick: float = DEFAULT_SECONDS_PER_TICK,
        sink: Optional[SampleSink] = None,
    ) -> None:
        # Constructed first so a bad window size fails before anything else.
        self.analyzer = SpectralAnalyzer(window_size, seconds_per_tick)
        self.classifier = FeatureClassifier()
        self.window = SampleWindow(window_size)
        self.link = link
        self.sink = sink
        self.stats = ControllerStats()
        self.last_record: Optional[FeatureRecord] = None

    def on_sample(self, sample: Sample) -> Optional[FeatureRecord]:
        """
        Feed one sample.

        Returns the record built when this sample completed a window (sent
        or not), otherwise ``None``.
        """
        self.stats.samples += 1
        self._record_raw(sample)
        if self.window.push(sample) is WindowStatus.FILLING:
            return None

        try:
            record = self._analyze_window()
        finally:
            self.window.reset()

        if record is not None:
            self.last_record = record
            self._forward(record)
        return record

    def _analyze_window(self) -> Optional[FeatureRecord]:
        self.stats.windows += 1
        with time_block("window analysis"):
            try:
                spectral = self.analyzer.analyze(self.window)
            except DegenerateWindowError as exc:
                self.stats.degenerate_windows += 1
                logger.warning("Dropping window %d: %s", self.stats.windows, exc)
                return None
            record = self.classifier.build(self.window, spectral)
        if not is_finite_record(record):
            logger.debug("Window %d produced non-finite features: %s", self.stats.windows, record.to_line())
        return record

    def _forward(self, record: FeatureRecord) -> None:
        try:
            self.link.send(record.to_bytes())
        except NotConnectedError as exc:
            self.stats.records_dropped += 1
            logger.debug("Record dropped: %s", exc)
        else:
            self.stats.records_sent += 1

    def _record_raw(self, sample: Sample) -> None:
        if self.sink is None:
            return
        try:
            self.sink.write_sample(sample)
        except OSError:
            logger.exception("Raw sample sink failed; disabling it")
            self.sink = None
