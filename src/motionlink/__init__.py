"""motionlink: accelerometer window features streamed to a paired peer."""

from .errors import (
    DegenerateWindowError,
    InvalidLengthError,
    LinkStateError,
    MotionLinkError,
    NotConnectedError,
    RecordFormatError,
    WindowOverflowError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "MotionLinkError",
    "WindowOverflowError",
    "InvalidLengthError",
    "DegenerateWindowError",
    "NotConnectedError",
    "LinkStateError",
    "RecordFormatError",
]
