"""Single-consumer notification channel shared by the sensor and link threads.

Producers (sensor reader threads, transport threads, the link session itself)
post items from any thread; exactly one consumer takes them in arrival order.
Closing the channel cancels the consumer: items posted before :meth:`close`
are still delivered, anything posted afterwards is refused.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any, List, Optional

from .models import Sample

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SampleArrived:
    sample: Sample


class _Closed:
    """Sentinel marking the end of the stream."""

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return "<channel closed>"


_CLOSED = _Closed()


class NotificationChannel:
    """Unbounded FIFO with an explicit close/cancel signal."""

    def __init__(self) -> None:
        self._queue: Queue[Any] = Queue()
        self._lock = threading.Lock()
        self._closed = False

    def post(self, item: Any) -> bool:
        """
        Enqueue ``item`` for the consumer.

        Returns False (and drops the item) if the channel is already closed.
        """
        with self._lock:
            if self._closed:
                logger.debug("Dropping %r posted after close", item)
                return False
            self._queue.put_nowait(item)
            return True

    def get(self, timeout: Optional[float] = None) -> Optional[Any]:
        """
        Return the next item, or ``None`` on timeout or once the channel is
        closed and drained.
        """
        try:
            item = self._queue.get(timeout=timeout) if timeout is not None else self._queue.get()
        except Empty:
            return None
        if item is _CLOSED:
            # Leave the sentinel in place so every later get() also ends.
            self._queue.put_nowait(_CLOSED)
            return None
        return item

    def get_nowait(self) -> Optional[Any]:
        try:
            item = self._queue.get_nowait()
        except Empty:
            return None
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            return None
        return item

    def drain(self) -> List[Any]:
        """Return every item currently queued without blocking."""
        items: List[Any] = []
        while True:
            item = self.get_nowait()
            if item is None:
                return items
            items.append(item)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put_nowait(_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return self._queue.qsize()
