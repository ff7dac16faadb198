"""CSV writing helpers for raw accelerometer samples."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Optional, TextIO

from ..core.models import Sample

SAMPLE_HEADERS = ("timestamp", "x", "y", "z")


class CsvSampleSink:
    """
    Append every sample to a CSV file as ``timestamp,x,y,z``.

    The file is opened lazily on the first sample and flushed every
    ``flush_every`` rows.
    """

    def __init__(self, path: Path | str, *, flush_every: int = 128) -> None:
        self.path = Path(path)
        self.flush_every = max(1, int(flush_every))
        self._fh: Optional[TextIO] = None
        self._writer: Any = None
        self._pending = 0
        self._closed = False

    def _open(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        new_file = not self.path.exists() or self.path.stat().st_size == 0
        self._fh = self.path.open("a", newline="", encoding="utf-8")
        self._writer = csv.writer(self._fh)
        if new_file:
            self._writer.writerow(SAMPLE_HEADERS)

    def write_sample(self, sample: Sample) -> None:
        if self._closed:
            raise ValueError(f"sink for {self.path} is closed")
        if self._fh is None:
            self._open()
        self._writer.writerow((sample.timestamp, sample.x, sample.y, sample.z))
        self._pending += 1
        if self._pending >= self.flush_every:
            self.flush()

    def flush(self) -> None:
        if self._fh is not None:
            self._fh.flush()
        self._pending = 0

    def close(self) -> None:
        self._closed = True
        if self._fh is None:
            return
        self._fh.close()
        self._fh = None
        self._writer = None

    def __enter__(self) -> "CsvSampleSink":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
