from __future__ import annotations

import math

import pytest

from motionlink.analysis.features import (
    FeatureClassifier,
    axis_averages,
    classify_orientation,
    magnitude_ratios,
)
from motionlink.core.models import (
    FeatureRecord,
    Orientation,
    Sample,
    SpectralFeatures,
    is_finite_record,
)
from motionlink.core.window import SampleWindow
from motionlink.errors import RecordFormatError


@pytest.mark.parametrize(
    "averages, expected",
    [
        ((7.0, 1.0, 1.0), Orientation.FRONT),
        ((-9.8, 0.2, -0.3), Orientation.FRONT),
        ((1.0, 1.0, 8.0), Orientation.TOP),
        ((0.0, 0.0, -9.81), Orientation.TOP),
        ((7.0, 7.0, 7.0), Orientation.UNKNOWN),
        ((1.0, 9.0, 1.0), Orientation.UNKNOWN),
        # Thresholds are strict on both sides.
        ((6.0, 0.0, 0.0), Orientation.UNKNOWN),
        ((7.0, 4.0, 0.0), Orientation.UNKNOWN),
        ((0.0, 0.0, 0.0), Orientation.UNKNOWN),
    ],
)
def test_classify_orientation(averages, expected) -> None:
    assert classify_orientation(*averages) is expected


def test_magnitude_ratios_regular() -> None:
    assert magnitude_ratios(2.0, 4.0, 8.0) == pytest.approx((0.5, 0.5, 4.0))


def test_magnitude_ratios_zero_denominators_are_not_guarded() -> None:
    xy, yz, zx = magnitude_ratios(3.0, 0.0, 0.0)
    assert xy == math.inf
    assert math.isnan(yz)
    assert zx == 0.0


def test_axis_averages() -> None:
    window = SampleWindow(4)
    for i in range(4):
        window.push(Sample(x=float(i), y=1.0, z=-2.0, timestamp=i))
    assert axis_averages(window) == pytest.approx((1.5, 1.0, -2.0))


def test_classifier_builds_record_from_window_and_spectrum() -> None:
    window = SampleWindow(4)
    for i in range(4):
        window.push(Sample(x=0.1, y=-0.2, z=9.8, timestamp=i))
    spectral = (
        SpectralFeatures(1.0, 2.0),
        SpectralFeatures(3.0, 4.0),
        SpectralFeatures(5.0, 0.0),
    )

    record = FeatureClassifier().build(window, spectral)

    assert record.orientation is Orientation.TOP
    assert (record.freq_x, record.freq_y, record.freq_z) == (1.0, 3.0, 5.0)
    assert (record.mag_x, record.mag_y, record.mag_z) == (2.0, 4.0, 0.0)
    assert record.ratio_xy == pytest.approx(0.5)
    assert record.ratio_yz == math.inf
    assert record.ratio_zx == 0.0
    assert not is_finite_record(record)


def _record(**overrides) -> FeatureRecord:
    values = dict(
        orientation=Orientation.FRONT,
        freq_x=12.6,
        freq_y=0.787,
        freq_z=1.0 / 3.0,
        mag_x=63.99999,
        mag_y=1e-12,
        mag_z=2.5,
        ratio_xy=6.4e13,
        ratio_yz=4e-13,
        ratio_zx=0.0390625,
    )
    values.update(overrides)
    return FeatureRecord(**values)


def test_record_line_layout() -> None:
    line = _record().to_line()
    parts = line.split(",")
    assert len(parts) == 10
    assert parts[0] == "1"
    assert "\n" not in line
    assert _record().to_bytes() == line.encode("ascii")


def test_record_text_round_trip_is_exact() -> None:
    record = _record()
    assert FeatureRecord.from_line(record.to_line()) == record


def test_non_finite_values_survive_serialization() -> None:
    record = _record(ratio_xy=math.inf, ratio_yz=math.nan, ratio_zx=-math.inf)
    parsed = FeatureRecord.from_line(record.to_line())
    assert parsed.ratio_xy == math.inf
    assert math.isnan(parsed.ratio_yz)
    assert parsed.ratio_zx == -math.inf


def test_from_line_accepts_infinity_spelling() -> None:
    parsed = FeatureRecord.from_line("2,1.0,2.0,3.0,4.0,5.0,6.0,Infinity,NaN,-Infinity\n")
    assert parsed.orientation is Orientation.TOP
    assert parsed.ratio_xy == math.inf
    assert math.isnan(parsed.ratio_yz)
    assert parsed.ratio_zx == -math.inf


@pytest.mark.parametrize(
    "line",
    [
        "",
        "1,2,3",
        "7,1,2,3,4,5,6,7,8,9",
        "x,1,2,3,4,5,6,7,8,9",
        "1,1,2,3,4,5,six,7,8,9",
    ],
)
def test_from_line_rejects_malformed(line: str) -> None:
    with pytest.raises(RecordFormatError):
        FeatureRecord.from_line(line)
