"""Background sample producers that post into the notification channel."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterable, Optional

from ..core.models import Sample
from ..core.notifications import SampleArrived
from .accelerometer import parse_line

logger = logging.getLogger(__name__)

PostFn = Callable[[Any], Any]
LineParser = Callable[[str], Optional[Sample]]


class ThreadedSource:
    """
    Register/unregister lifecycle shared by sample sources.

    ``register()`` starts a daemon thread running :meth:`_produce`;
    ``unregister()`` asks it to stop. Both are idempotent. Samples already
    posted stay in the channel and are processed normally.
    """

    thread_name = "sample-source"

    def __init__(self, post: PostFn) -> None:
        self._post = post
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    @property
    def registered(self) -> bool:
        return (
            self._stop_event is not None
            and not self._stop_event.is_set()
            and self.is_alive()
        )

    def register(self) -> None:
        if self.registered:
            return
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._run, args=(stop_event,), name=self.thread_name, daemon=True
        )
        self._stop_event = stop_event
        self._thread = thread
        thread.start()
        logger.info("%s registered", self.thread_name)

    def unregister(self, *, join: bool = False, timeout: Optional[float] = None) -> None:
        if not self.registered:
            return
        assert self._stop_event is not None
        self._stop_event.set()
        self._interrupt()
        if join and self._thread is not None:
            self._thread.join(timeout)
        logger.info("%s unregistered", self.thread_name)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _emit(self, sample: Sample, stop_event: threading.Event) -> bool:
        if stop_event.is_set():
            return False
        self._post(SampleArrived(sample))
        return True

    def _run(self, stop_event: threading.Event) -> None:
        try:
            self._produce(stop_event)
        except Exception:
            logger.exception("%s failed", self.thread_name)

    def _produce(self, stop_event: threading.Event) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    def _interrupt(self) -> None:
        """Hook for sources that must unblock a pending read."""


class LineSampleSource(ThreadedSource):
    """
    Read text lines from ``stream_factory()`` and post parsed samples.

    The factory is called on every ``register()`` so a source can be
    restarted; if the returned iterable has ``close()``, it is called when
    the source is unregistered or the stream ends.
    """

    thread_name = "sensor-line-reader"

    def __init__(
        self,
        stream_factory: Callable[[], Iterable[str]],
        post: PostFn,
        parser: LineParser = parse_line,
    ) -> None:
        super().__init__(post)
        self._stream_factory = stream_factory
        self._parser = parser
        self._stream: Optional[Iterable[str]] = None

    def _produce(self, stop_event: threading.Event) -> None:
        stream = self._stream_factory()
        self._stream = stream
        try:
            for raw_line in stream:
                if stop_event.is_set():
                    break
                sample = self._parser(raw_line)
                if sample is None:
                    continue
                if not self._emit(sample, stop_event):
                    break
        finally:
            self._close_stream(stream)
            self._stream = None
        logger.info("Sensor stream ended")

    def _interrupt(self) -> None:
        stream = self._stream
        if stream is not None:
            self._close_stream(stream)

    @staticmethod
    def _close_stream(stream: Iterable[str]) -> None:
        close = getattr(stream, "close", None)
        if close is None:
            return
        try:
            close()
        except (OSError, ValueError):
            # ValueError: a generator that is still running in the reader thread
            logger.debug("Error closing sensor stream", exc_info=True)
