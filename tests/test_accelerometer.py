from __future__ import annotations

import json

import pytest

from motionlink.core.models import Sample
from motionlink.sensors.accelerometer import PARSE_TIMING, parse_line


def test_parse_json_line() -> None:
    line = json.dumps({"timestamp_ns": 123456789, "ax": 0.1, "ay": -0.2, "az": 9.8})
    assert parse_line(line) == Sample(x=0.1, y=-0.2, z=9.8, timestamp=123456789)


def test_parse_json_aliases() -> None:
    line = json.dumps({"timestamp": 5, "x": 1, "y": 2, "z": 3, "sensor_id": 1})
    assert parse_line(line) == Sample(1.0, 2.0, 3.0, 5)


def test_parse_csv_line_ignores_extra_columns() -> None:
    assert parse_line("1000,0.5,1.5,-9.81,42\n") == Sample(0.5, 1.5, -9.81, 1000)


@pytest.mark.parametrize(
    "line",
    [
        "",
        "   \n",
        "timestamp_ns,ax,ay,az",
        "{not json",
        "[1, 2, 3]",
        json.dumps({"ax": 1, "ay": 2, "az": 3}),
        json.dumps({"timestamp_ns": 1, "ax": 1, "ay": 2}),
        json.dumps({"timestamp_ns": 1, "ax": "abc", "ay": 2, "az": 3}),
        "1,2,3",
        "1,a,b,c",
    ],
)
def test_unusable_lines_return_none(line: str) -> None:
    assert parse_line(line) is None


def test_debug_timing_does_not_change_result(monkeypatch) -> None:
    monkeypatch.setenv("MOTIONLINK_DEBUG", "1")
    before = PARSE_TIMING.count
    assert parse_line("7,1,2,3") == Sample(1.0, 2.0, 3.0, 7)
    assert PARSE_TIMING.count == before + 1


def test_csv_nanosecond_timestamp_keeps_full_precision() -> None:
    sample = parse_line("1700000000123456789,0.0,0.0,9.81")
    assert sample is not None
    assert sample.timestamp == 1700000000123456789


def test_csv_float_formatted_timestamp_still_accepted() -> None:
    assert parse_line("1500.0,0.0,0.0,9.81") == Sample(0.0, 0.0, 9.81, 1500)


@pytest.mark.parametrize("line", ["+inf,1,2,3", '{"timestamp_ns": 1e999, "ax": 1, "ay": 2, "az": 3}'])
def test_infinite_timestamp_is_rejected(line: str) -> None:
    assert parse_line(line) is None
