from __future__ import annotations

import math

import numpy as np
import pytest

from motionlink.analysis.spectral import SpectralAnalyzer, effective_sample_rate
from motionlink.core.models import Sample
from motionlink.core.window import SampleWindow
from motionlink.errors import DegenerateWindowError, InvalidLengthError

PERIOD_NS = 10_000_000  # 100 Hz


def _fill(window: SampleWindow, fx: float, fy: float, fz: float, *, amp=(1.0, 1.0, 1.0), period_ns=PERIOD_NS) -> None:
    for i in range(window.capacity):
        t = i * period_ns / 1e9
        window.push(
            Sample(
                x=amp[0] * math.sin(2 * math.pi * fx * t),
                y=amp[1] * math.sin(2 * math.pi * fy * t),
                z=amp[2] * math.sin(2 * math.pi * fz * t),
                timestamp=5_000 + i * period_ns,
            )
        )


def test_effective_sample_rate_uses_boundary_timestamps() -> None:
    ts = np.arange(128, dtype=np.int64) * PERIOD_NS
    # N / span, not (N - 1) / span.
    assert effective_sample_rate(ts) == pytest.approx(128 / (127 * 0.01))
    assert effective_sample_rate([0, 2_000], seconds_per_tick=1e-3) == pytest.approx(1.0)


@pytest.mark.parametrize("ts", [[7, 7, 7], [10, 5], [3]])
def test_effective_sample_rate_degenerate(ts) -> None:
    with pytest.raises(DegenerateWindowError):
        effective_sample_rate(ts)


@pytest.mark.parametrize(
    "freqs",
    [
        (12.5, 5.0, 30.0),
        (1.0, 2.0, 3.0),
        (10.0, 25.0, 45.0),
        (7.3, 18.9, 49.0),
        (33.3, 0.9, 20.0),
    ],
)
def test_dominant_frequency_within_one_bin(freqs) -> None:
    window = SampleWindow(128)
    _fill(window, *freqs)
    analyzer = SpectralAnalyzer(128)

    features = analyzer.analyze(window)

    bin_width = effective_sample_rate(window.timestamps) / 128
    for expected, feat in zip(freqs, features):
        assert abs(feat.dominant_frequency - expected) <= bin_width


def test_peak_magnitude_is_real_part_at_dominant_bin() -> None:
    window = SampleWindow(64)
    _fill(window, 10.0, 20.0, 7.0, amp=(2.0, 1.0, 0.5))
    analyzer = SpectralAnalyzer(64)

    features = analyzer.analyze(window)

    for axis, feat in zip(window.axes(), features):
        spectrum = np.fft.fft(np.asarray(axis))
        power = np.abs(spectrum[1:33]) ** 2
        k = int(np.argmax(power)) + 1
        rate = effective_sample_rate(window.timestamps)
        assert feat.dominant_frequency == pytest.approx(k * rate / 64)
        assert feat.peak_magnitude == pytest.approx(abs(spectrum[k].real), abs=1e-9)


def test_dc_is_never_dominant() -> None:
    window = SampleWindow(32)
    for i in range(32):
        window.push(Sample(x=9.81, y=0.0, z=0.0, timestamp=i * PERIOD_NS))
    fx, fy, _ = SpectralAnalyzer(32).analyze(window)
    rate = effective_sample_rate(window.timestamps)
    assert fx.dominant_frequency > 0.0
    assert fx.peak_magnitude == pytest.approx(0.0, abs=1e-9)
    # All-zero axis: every searched bin ties, the lowest one wins.
    assert fy.dominant_frequency == pytest.approx(rate / 32)
    assert fy.peak_magnitude == 0.0


def test_nyquist_bin_is_searched() -> None:
    window = SampleWindow(16)
    for i in range(16):
        window.push(Sample(x=(-1.0) ** i, y=0.0, z=0.0, timestamp=i * PERIOD_NS))
    fx, _, _ = SpectralAnalyzer(16).analyze(window)
    rate = effective_sample_rate(window.timestamps)
    assert fx.dominant_frequency == pytest.approx(8 * rate / 16)
    assert fx.peak_magnitude == pytest.approx(16.0)


def test_equal_timestamps_raise_degenerate() -> None:
    window = SampleWindow(8)
    for i in range(8):
        window.push(Sample(x=float(i), y=0.0, z=0.0, timestamp=42))
    with pytest.raises(DegenerateWindowError):
        SpectralAnalyzer(8).analyze(window)


def test_partial_window_rejected() -> None:
    window = SampleWindow(8)
    window.push(Sample(0.0, 0.0, 0.0, 0))
    with pytest.raises(ValueError):
        SpectralAnalyzer(8).analyze(window)


def test_analyzer_rejects_bad_window_size() -> None:
    with pytest.raises(InvalidLengthError):
        SpectralAnalyzer(100)
