"""Exception types raised by motionlink.

Every error derives from :class:`MotionLinkError` and from the builtin
exception closest to its meaning, so callers can catch either.
"""

from __future__ import annotations


class MotionLinkError(Exception):
    """Base class for all motionlink errors."""


class WindowOverflowError(MotionLinkError, OverflowError):
    """A sample was pushed into a window that is already complete."""


class InvalidLengthError(MotionLinkError, ValueError):
    """Transform length is not a power of two."""


class DegenerateWindowError(MotionLinkError, ValueError):
    """The window spans zero time, so no sample rate can be derived."""


class NotConnectedError(MotionLinkError, ConnectionError):
    """A send was attempted while the link is not connected."""


class LinkStateError(MotionLinkError, RuntimeError):
    """A link operation is not allowed in the current session state."""


class RecordFormatError(MotionLinkError, ValueError):
    """A serialized feature record could not be parsed."""


__all__ = [
    "MotionLinkError",
    "WindowOverflowError",
    "InvalidLengthError",
    "DegenerateWindowError",
    "NotConnectedError",
    "LinkStateError",
    "RecordFormatError",
]
