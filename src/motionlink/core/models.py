"""Shared dataclasses for samples, spectral features, and feature records."""

from __future__ import annotations

import math
from dataclasses import astuple, dataclass
from enum import Enum, IntEnum

from ..errors import RecordFormatError

FIELD_SEPARATOR = ","

RECORD_FIELDS = (
    "orientation",
    "freq_x",
    "freq_y",
    "freq_z",
    "mag_x",
    "mag_y",
    "mag_z",
    "ratio_xy",
    "ratio_yz",
    "ratio_zx",
)

_NON_FINITE_ALIASES = {
    "infinity": "inf",
    "+infinity": "inf",
    "-infinity": "-inf",
}


@dataclass(frozen=True, slots=True)
class Sample:
    """One accelerometer reading; ``timestamp`` is in sensor clock ticks."""

    x: float
    y: float
    z: float
    timestamp: int


class WindowStatus(Enum):
    FILLING = "filling"
    COMPLETE = "complete"


class Orientation(IntEnum):
    """Coarse device pose. The integer value is the wire code."""

    UNKNOWN = 0
    FRONT = 1
    TOP = 2


@dataclass(frozen=True, slots=True)
class SpectralFeatures:
    dominant_frequency: float
    peak_magnitude: float


@dataclass(frozen=True, slots=True)
class FeatureRecord:
    """
    Per-window output sent to the peer.

    Field order matches the wire format::

        orientationCode,freqX,freqY,freqZ,magX,magY,magZ,ratioXY,ratioYZ,ratioZX
    """

    orientation: Orientation
    freq_x: float
    freq_y: float
    freq_z: float
    mag_x: float
    mag_y: float
    mag_z: float
    ratio_xy: float
    ratio_yz: float
    ratio_zx: float

    def to_line(self) -> str:
        """Render the record as comma-joined text without a trailing newline."""
        values = astuple(self)
        parts = [str(int(values[0]))]
        parts.extend(_format_float(v) for v in values[1:])
        return FIELD_SEPARATOR.join(parts)

    def to_bytes(self) -> bytes:
        return self.to_line().encode("ascii")

    @classmethod
    def from_line(cls, line: str) -> "FeatureRecord":
        """Parse text produced by :meth:`to_line`."""
        parts = line.strip().split(FIELD_SEPARATOR)
        if len(parts) != len(RECORD_FIELDS):
            raise RecordFormatError(
                f"expected {len(RECORD_FIELDS)} fields, got {len(parts)}: {line!r}"
            )
        try:
            orientation = Orientation(int(parts[0]))
        except ValueError as exc:
            raise RecordFormatError(f"bad orientation code {parts[0]!r}") from exc
        floats = [_parse_float(name, text) for name, text in zip(RECORD_FIELDS[1:], parts[1:])]
        return cls(orientation, *floats)


def _format_float(value: float) -> str:
    # repr() is the shortest text that parses back to the same double.
    return repr(float(value))


def _parse_float(name: str, text: str) -> float:
    token = text.strip()
    token = _NON_FINITE_ALIASES.get(token.lower(), token)
    try:
        return float(token)
    except ValueError as exc:
        raise RecordFormatError(f"field {name} is not a number: {text!r}") from exc


def is_finite_record(record: FeatureRecord) -> bool:
    """Return True when every float field of ``record`` is finite."""
    return all(math.isfinite(v) for v in astuple(record)[1:])
