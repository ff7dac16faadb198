"""
Accelerometer loggers emit one reading per line, either as JSON::

    {"timestamp_ns": 1234567890, "ax": 0.12, "ay": -0.03, "az": 9.79}

(``timestamp`` and ``x``/``y``/``z`` are accepted as aliases) or as CSV::

    timestamp_ns,ax,ay,az[,extra columns ignored]

``parse_line()`` accepts both formats and returns a :class:`Sample`.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Sequence

from ..core.models import Sample
from ..tools.debug import TimingStats, time_block

logger = logging.getLogger(__name__)

_TIMESTAMP_KEYS = ("timestamp_ns", "timestamp")
_AXIS_KEYS = (("ax", "x"), ("ay", "y"), ("az", "z"))


def _first_present(obj: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        value = obj.get(key)
        if value is not None:
            return value
    return None


def _parse_json_line(text: str) -> Sample | None:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Bad JSON from sensor stream: %r (%s)", text, exc)
        return None
    if not isinstance(obj, Mapping):
        logger.warning("Sensor line is not a JSON object: %r", text)
        return None

    ts_raw = _first_present(obj, _TIMESTAMP_KEYS)
    if ts_raw is None:
        logger.warning("Missing timestamp in sensor line: %r", obj)
        return None

    try:
        timestamp = int(ts_raw)
        axes = []
        for keys in _AXIS_KEYS:
            value = _first_present(obj, keys)
            if value is None:
                logger.warning("Missing field %s in sensor line: %r", keys[0], obj)
                return None
            axes.append(float(value))
    except (OverflowError, TypeError, ValueError) as exc:
        logger.warning("Bad field value in sensor line %r (%s)", obj, exc)
        return None

    return Sample(x=axes[0], y=axes[1], z=axes[2], timestamp=timestamp)


def _parse_timestamp(text: str) -> int:
    # Nanosecond ticks exceed 2**53; only go through float for "123.0"-style input.
    try:
        return int(text)
    except ValueError:
        return int(float(text))


def _parse_csv_line(text: str) -> Sample | None:
    parts: Sequence[str] = text.split(",")
    if len(parts) < 4:
        logger.warning(
            "Expected at least 4 comma-separated values, got %d: %r", len(parts), text
        )
        return None
    try:
        timestamp = _parse_timestamp(parts[0])
        x, y, z = map(float, parts[1:4])
    except (OverflowError, ValueError) as exc:
        logger.warning("Bad CSV field in sensor line %r (%s)", text, exc)
        return None
    return Sample(x=x, y=y, z=z, timestamp=timestamp)


PARSE_TIMING = TimingStats("parse_line")


def parse_line(line: str) -> Optional[Sample]:
    """
    Parse a single text line into a :class:`Sample`.

    Blank lines, CSV header rows and malformed input return ``None`` so
    callers can skip them without raising.
    """
    text = line.strip()
    if not text:
        return None

    if text[0].isalpha():
        # header row such as "timestamp_ns,ax,ay,az"
        return None

    with time_block("parse_line", stats=PARSE_TIMING):
        if text[0] == "{":
            return _parse_json_line(text)
        return _parse_csv_line(text)
