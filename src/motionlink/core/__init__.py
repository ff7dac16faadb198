"""Sampling core: samples, windows, the notification channel, and the controller.

The controller (:mod:`controller`) and the event-loop owner (:mod:`service`)
depend on :mod:`motionlink.analysis` and :mod:`motionlink.remote`; import them
from their modules directly. Only the leaf data structures are re-exported
here.
"""

from .models import FeatureRecord, Orientation, Sample, SpectralFeatures, WindowStatus
from .notifications import NotificationChannel, SampleArrived
from .window import SampleWindow

__all__ = [
    "FeatureRecord",
    "Orientation",
    "Sample",
    "SpectralFeatures",
    "WindowStatus",
    "NotificationChannel",
    "SampleArrived",
    "SampleWindow",
]
