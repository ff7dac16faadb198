from __future__ import annotations

import logging

import pytest

from motionlink.tools.debug import TimingStats, debug_enabled, time_block


def test_debug_flag_follows_environment(monkeypatch) -> None:
    monkeypatch.delenv("MOTIONLINK_DEBUG", raising=False)
    assert not debug_enabled()
    monkeypatch.setenv("MOTIONLINK_DEBUG", "yes")
    assert debug_enabled()


def test_time_block_reports_only_when_enabled(monkeypatch) -> None:
    messages = []
    monkeypatch.delenv("MOTIONLINK_DEBUG", raising=False)
    with time_block("fft", emitter=messages.append):
        pass
    assert messages == []

    monkeypatch.setenv("MOTIONLINK_DEBUG", "1")
    with time_block("fft", emitter=messages.append):
        pass
    assert len(messages) == 1
    assert messages[0].startswith("fft took ")


def test_time_block_logs_at_debug(monkeypatch, caplog) -> None:
    monkeypatch.setenv("MOTIONLINK_DEBUG", "1")
    with caplog.at_level(logging.DEBUG, logger="motionlink.tools.debug"):
        with time_block("window analysis"):
            pass
    assert any("window analysis took" in r.getMessage() for r in caplog.records)


def test_timing_stats_accumulate_and_report(caplog) -> None:
    stats = TimingStats("fft", report_every=2)
    with caplog.at_level(logging.INFO, logger="motionlink.tools.debug"):
        stats.add(0.001)
        assert not caplog.records
        stats.add(0.003)
    assert stats.count == 2
    assert stats.mean_us == pytest.approx(2000.0)
    assert "fft avg 2000.0 us over 2 calls" in caplog.records[0].getMessage()
    stats.reset()
    assert stats.mean_us == 0.0


def test_time_block_feeds_stats_instead_of_emitter(monkeypatch) -> None:
    monkeypatch.setenv("MOTIONLINK_DEBUG", "1")
    stats = TimingStats("window", report_every=100)
    messages = []
    with time_block("window", emitter=messages.append, stats=stats):
        pass
    assert stats.count == 1
    assert messages == []
