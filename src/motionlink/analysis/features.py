"""Feature extraction helpers: orientation class and magnitude ratios."""

from __future__ import annotations

from typing import Union

import numpy as np

from ..core.models import FeatureRecord, Orientation
from ..core.window import SampleWindow
from .spectral import AxisFeatures

Number = Union[float, np.floating]

# Fixed pose thresholds in sensor units (m/s^2 for accelerometers). An axis
# carrying most of gravity reads above STRONG, the others stay below WEAK.
STRONG_AXIS_THRESHOLD = 6.0
WEAK_AXIS_THRESHOLD = 4.0


def axis_averages(window: SampleWindow) -> tuple[float, float, float]:
    """Time-domain mean of each axis over the filled part of ``window``."""
    if window.count == 0:
        raise ValueError("window must contain at least one sample")
    return (
        float(np.mean(window.x)),
        float(np.mean(window.y)),
        float(np.mean(window.z)),
    )


def classify_orientation(avg_x: Number, avg_y: Number, avg_z: Number) -> Orientation:
    """
    Map per-axis averages to a coarse pose.

    ``FRONT`` when gravity sits on X, ``TOP`` when it sits on Z, otherwise
    ``UNKNOWN``.
    """
    ax, ay, az = abs(avg_x), abs(avg_y), abs(avg_z)
    if ax > STRONG_AXIS_THRESHOLD and ay < WEAK_AXIS_THRESHOLD and az < WEAK_AXIS_THRESHOLD:
        return Orientation.FRONT
    if ax < WEAK_AXIS_THRESHOLD and ay < WEAK_AXIS_THRESHOLD and az > STRONG_AXIS_THRESHOLD:
        return Orientation.TOP
    return Orientation.UNKNOWN


def magnitude_ratios(mag_x: Number, mag_y: Number, mag_z: Number) -> tuple[float, float, float]:
    """
    Return ``(x/y, y/z, z/x)``.

    Zero denominators are not guarded: they yield ``inf`` or ``nan`` like
    IEEE division, and consumers must accept non-finite values.
    """
    mags = np.array([mag_x, mag_y, mag_z], dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        ratios = mags / np.roll(mags, -1)
    return float(ratios[0]), float(ratios[1]), float(ratios[2])


class FeatureClassifier:
    """Assemble the :class:`FeatureRecord` for one analysed window."""

    def build(self, window: SampleWindow, spectral: AxisFeatures) -> FeatureRecord:
        orientation = classify_orientation(*axis_averages(window))
        fx, fy, fz = spectral
        ratio_xy, ratio_yz, ratio_zx = magnitude_ratios(
            fx.peak_magnitude, fy.peak_magnitude, fz.peak_magnitude
        )
        return FeatureRecord(
            orientation=orientation,
            freq_x=fx.dominant_frequency,
            freq_y=fy.dominant_frequency,
            freq_z=fz.dominant_frequency,
            mag_x=fx.peak_magnitude,
            mag_y=fy.peak_magnitude,
            mag_z=fz.peak_magnitude,
            ratio_xy=ratio_xy,
            ratio_yz=ratio_yz,
            ratio_zx=ratio_zx,
        )
