"""Interface the link session expects from a byte-stream transport."""

from __future__ import annotations

import logging
from queue import Empty, Full, Queue
from typing import Callable, Protocol

from .events import TransportEvent

logger = logging.getLogger(__name__)

EmitFn = Callable[[TransportEvent], None]


def offer_queue(queue: Queue, item: object) -> None:
    """Best-effort put that drops the oldest payload when the queue is full."""
    try:
        queue.put_nowait(item)
    except Full:
        try:
            dropped = queue.get_nowait()
        except Empty:
            pass
        else:
            logger.debug("Write queue full, dropped %r", dropped)
        queue.put_nowait(item)


class Transport(Protocol):
    """
    Asynchronous point-to-point byte transport.

    Every request returns immediately; its outcome arrives later through the
    ``emit`` callable passed to :meth:`bind`, usually from a transport-owned
    thread. Each request carries a ``token`` that the transport copies into
    the events it produces for that request or connection.
    """

    supports_listen: bool

    def bind(self, emit: EmitFn) -> None:  # pragma: no cover - protocol
        ...

    def listen(self, token: int) -> None:  # pragma: no cover - protocol
        ...

    def connect(self, address: str, token: int) -> None:  # pragma: no cover - protocol
        ...

    def write(self, data: bytes, token: int) -> None:  # pragma: no cover - protocol
        ...

    def disconnect(self) -> None:  # pragma: no cover - protocol
        """Drop the active connection and any pending attempt."""
        ...

    def close(self) -> None:  # pragma: no cover - protocol
        """Release every resource; the transport is not reused afterwards."""
        ...
