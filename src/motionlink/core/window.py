"""Fixed-capacity accumulator for one analysis window of samples."""

from __future__ import annotations

import numpy as np

from ..errors import WindowOverflowError
from .models import Sample, WindowStatus

DEFAULT_WINDOW_SIZE = 128


class SampleWindow:
    """
    Bounded buffer of ``capacity`` tri-axial samples plus their timestamps.

    Storage is allocated once; :meth:`reset` only rewinds the fill count so
    the next window overwrites the same arrays in place.
    """

    __slots__ = ("_capacity", "_x", "_y", "_z", "_timestamps", "_count")

    def __init__(self, capacity: int = DEFAULT_WINDOW_SIZE) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = int(capacity)
        self._x = np.zeros(self._capacity, dtype=np.float64)
        self._y = np.zeros(self._capacity, dtype=np.float64)
        self._z = np.zeros(self._capacity, dtype=np.float64)
        self._timestamps = np.zeros(self._capacity, dtype=np.int64)
        self._count = 0

    def push(self, sample: Sample) -> WindowStatus:
        """
        Append ``sample`` and report whether the window is now complete.

        Raises
        ------
        WindowOverflowError
            If the window is already complete and has not been reset.
        """
        idx = self._count
        if idx >= self._capacity:
            raise WindowOverflowError(
                f"window of {self._capacity} samples is full; call reset() first"
            )
        self._x[idx] = sample.x
        self._y[idx] = sample.y
        self._z[idx] = sample.z
        self._timestamps[idx] = sample.timestamp
        self._count = idx + 1
        if self._count == self._capacity:
            return WindowStatus.COMPLETE
        return WindowStatus.FILLING

    def reset(self) -> None:
        self._count = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def count(self) -> int:
        return self._count

    @property
    def is_complete(self) -> bool:
        return self._count == self._capacity

    def __len__(self) -> int:  # pragma: no cover - trivial
        return self._count

    # Views cover only the valid [0, count) prefix and are read-only so
    # consumers cannot corrupt the next window.
    @property
    def x(self) -> np.ndarray:
        return _readonly(self._x[: self._count])

    @property
    def y(self) -> np.ndarray:
        return _readonly(self._y[: self._count])

    @property
    def z(self) -> np.ndarray:
        return _readonly(self._z[: self._count])

    @property
    def timestamps(self) -> np.ndarray:
        return _readonly(self._timestamps[: self._count])

    def axes(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return ``(x, y, z)`` views in window order."""
        return self.x, self.y, self.z


def _readonly(view: np.ndarray) -> np.ndarray:
    view.flags.writeable = False
    return view
