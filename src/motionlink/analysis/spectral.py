"""Per-axis dominant frequency and peak magnitude of a completed window."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike

from ..core.models import SpectralFeatures
from ..core.window import SampleWindow
from ..errors import DegenerateWindowError
from .fft import Radix2FFT

NS_PER_SECOND = 1_000_000_000
DEFAULT_SECONDS_PER_TICK = 1.0 / NS_PER_SECOND

AxisFeatures = tuple[SpectralFeatures, SpectralFeatures, SpectralFeatures]


@dataclass(slots=True)
class ComplexSeries:
    """Real/imaginary scratch pair of equal length."""

    real: np.ndarray
    imag: np.ndarray

    @classmethod
    def zeros(cls, n: int) -> "ComplexSeries":
        return cls(np.zeros(n, dtype=np.float64), np.zeros(n, dtype=np.float64))

    def load(self, values: ArrayLike) -> None:
        """Copy ``values`` into the real part and clear the imaginary part."""
        np.copyto(self.real, values)
        self.imag.fill(0.0)


def effective_sample_rate(timestamps: ArrayLike, seconds_per_tick: float = DEFAULT_SECONDS_PER_TICK) -> float:
    """
    Return the sample rate in Hz implied by a window's boundary timestamps.

    ``rate = N / ((t[N-1] - t[0]) * seconds_per_tick)``

    Raises
    ------
    DegenerateWindowError
        If the window does not span a positive amount of time.
    """
    ts = np.asarray(timestamps)
    n = ts.shape[0]
    if n < 2:
        raise DegenerateWindowError(f"need at least two timestamps, got {n}")
    span_ticks = int(ts[-1]) - int(ts[0])
    if span_ticks <= 0:
        raise DegenerateWindowError(
            f"window spans {span_ticks} ticks ({int(ts[0])} -> {int(ts[-1])})"
        )
    return n / (span_ticks * float(seconds_per_tick))


class SpectralAnalyzer:
    """
    Extract :class:`SpectralFeatures` for each axis of a full window.

    The transform and three :class:`ComplexSeries` scratch pairs are created
    once for ``window_size`` and overwritten on every call to
    :meth:`analyze`, so steady-state analysis allocates no new buffers.

    The dominant bin is searched in ``[1, N/2]`` (DC and the mirrored upper
    half are skipped) using ``re**2 + im**2``. The reported peak magnitude
    is ``abs(re)`` at that bin, i.e. the real component only; the ratio
    features downstream are built from that same quantity.
    """

    def __init__(self, window_size: int, seconds_per_tick: float = DEFAULT_SECONDS_PER_TICK) -> None:
        if seconds_per_tick <= 0:
            raise ValueError(f"seconds_per_tick must be > 0, got {seconds_per_tick}")
        # Raises InvalidLengthError for non power-of-two sizes.
        self._fft = Radix2FFT(window_size)
        self.window_size = self._fft.n
        self.seconds_per_tick = float(seconds_per_tick)
        self._series = tuple(ComplexSeries.zeros(self.window_size) for _ in range(3))
        half = self.window_size // 2
        self._power = np.empty(half, dtype=np.float64)
        self._work = np.empty(half, dtype=np.float64)

    def analyze(self, window: SampleWindow) -> AxisFeatures:
        """
        Transform each axis of ``window`` and return ``(x, y, z)`` features.

        Raises
        ------
        ValueError
            If the window is not exactly ``window_size`` samples long.
        DegenerateWindowError
            If the window's boundary timestamps are equal.
        """
        if window.count != self.window_size:
            raise ValueError(
                f"window holds {window.count} samples, analyzer expects {self.window_size}"
            )
        rate = effective_sample_rate(window.timestamps, self.seconds_per_tick)
        x, y, z = window.axes()
        return (
            self._analyze_axis(self._series[0], x, rate),
            self._analyze_axis(self._series[1], y, rate),
            self._analyze_axis(self._series[2], z, rate),
        )

    def _analyze_axis(self, series: ComplexSeries, values: np.ndarray, rate_hz: float) -> SpectralFeatures:
        series.load(values)
        self._fft.transform(series.real, series.imag)
        k = self.dominant_bin(series)
        return SpectralFeatures(
            dominant_frequency=k * rate_hz / self.window_size,
            peak_magnitude=abs(float(series.real[k])),
        )

    def dominant_bin(self, series: ComplexSeries) -> int:
        """Index of the strongest bin in ``[1, N/2]``; ties go to the lowest."""
        half = self.window_size // 2
        re = series.real[1 : half + 1]
        im = series.imag[1 : half + 1]
        np.multiply(re, re, out=self._power)
        np.multiply(im, im, out=self._work)
        self._power += self._work
        return int(np.argmax(self._power)) + 1
