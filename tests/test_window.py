import pathlib
import sys
import unittest

import numpy as np

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from motionlink.core.models import Sample, WindowStatus
from motionlink.core.window import SampleWindow
from motionlink.errors import WindowOverflowError


def _sample(i: int) -> Sample:
    return Sample(x=float(i), y=float(-i), z=0.5 * i, timestamp=1_000 * i)


class SampleWindowTest(unittest.TestCase):
    def test_complete_exactly_on_last_push(self):
        window = SampleWindow(8)
        statuses = [window.push(_sample(i)) for i in range(8)]
        self.assertEqual(statuses[:-1], [WindowStatus.FILLING] * 7)
        self.assertIs(statuses[-1], WindowStatus.COMPLETE)
        self.assertTrue(window.is_complete)
        self.assertEqual(window.count, 8)

    def test_push_into_full_window_raises(self):
        window = SampleWindow(2)
        window.push(_sample(0))
        window.push(_sample(1))
        with self.assertRaises(WindowOverflowError):
            window.push(_sample(2))
        # Overflow is also an OverflowError for generic callers.
        with self.assertRaises(OverflowError):
            window.push(_sample(3))
        self.assertEqual(window.count, 2)

    def test_reset_reuses_storage(self):
        window = SampleWindow(4)
        for i in range(4):
            window.push(_sample(i))
        window.reset()
        self.assertEqual(window.count, 0)
        self.assertFalse(window.is_complete)
        self.assertIs(window.push(_sample(10)), WindowStatus.FILLING)
        np.testing.assert_array_equal(window.x, [10.0])
        np.testing.assert_array_equal(window.timestamps, [10_000])

    def test_invalid_capacity(self):
        with self.assertRaises(ValueError):
            SampleWindow(0)


def test_views_cover_filled_prefix_and_are_read_only() -> None:
    window = SampleWindow(4)
    window.push(_sample(1))
    window.push(_sample(2))

    x, y, z = window.axes()
    np.testing.assert_array_equal(x, [1.0, 2.0])
    np.testing.assert_array_equal(y, [-1.0, -2.0])
    np.testing.assert_array_equal(z, [0.5, 1.0])
    assert window.timestamps.dtype == np.int64
    assert not x.flags.writeable


def test_large_timestamps_keep_integer_precision() -> None:
    window = SampleWindow(2)
    base = 1_700_000_000_123_456_789
    window.push(Sample(0.0, 0.0, 0.0, base))
    window.push(Sample(0.0, 0.0, 0.0, base + 1))
    assert int(window.timestamps[1]) - int(window.timestamps[0]) == 1


if __name__ == "__main__":
    unittest.main()
