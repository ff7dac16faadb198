"""Owner of the sampling pipeline and the link: a single-consumer event loop."""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from ..analysis.spectral import DEFAULT_SECONDS_PER_TICK
from ..remote.events import (
    LINK_NOTIFICATION_TYPES,
    TRANSPORT_EVENT_TYPES,
    InboundData,
    InfoMessage,
    LinkNotification,
    LinkStateChanged,
    PeerNameResolved,
)
from ..remote.session import LinkSession
from ..remote.transport import Transport
from ..sensors.source import ThreadedSource
from .controller import SampleSink, SamplingController
from .notifications import NotificationChannel, SampleArrived
from .window import DEFAULT_WINDOW_SIZE

logger = logging.getLogger(__name__)

Listener = Callable[[LinkNotification], None]


class SenderService:
    """
    Wire a sample source, :class:`SamplingController` and :class:`LinkSession`
    around one :class:`NotificationChannel`.

    Sensor threads and transport threads only post into the channel. Every
    notification is handled by :meth:`dispatch` on the consumer thread, one
    at a time and in arrival order, so the window and the link state are
    never touched concurrently.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        window_size: int = DEFAULT_WINDOW_SIZE,
        seconds_per_tick: float = DEFAULT_SECONDS_PER_TICK,
        sink: Optional[SampleSink] = None,
        channel: Optional[NotificationChannel] = None,
    ) -> None:
        self.channel = channel or NotificationChannel()
        self.transport = transport
        transport.bind(self.channel.post)
        self.session = LinkSession(transport, self.channel.post)
        self.controller = SamplingController(
            self.session,
            window_size=window_size,
            seconds_per_tick=seconds_per_tick,
            sink=sink,
        )
        self.source: Optional[ThreadedSource] = None
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------ wiring
    def attach_source(self, source: ThreadedSource) -> None:
        if self.source is not None and self.source is not source:
            self.source.unregister()
        self.source = source

    def add_listener(self, listener: Listener) -> None:
        """Receive link notifications (state changes, peer name, inbound data, messages)."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    # ------------------------------------------------------------------ controls
    def start_sampling(self) -> None:
        if self.source is None:
            raise RuntimeError("no sample source attached")
        self.source.register()

    def stop_sampling(self) -> None:
        if self.source is not None:
            self.source.unregister()

    def listen(self) -> None:
        self.session.start()

    def connect(self, address: str) -> None:
        self.session.connect(address)

    def shutdown(self) -> None:
        """
        Stop sampling, stop the link and close the channel.

        Items posted before the call are still delivered to a running
        :meth:`run` loop (or by a final :meth:`process_pending`), but the raw
        sink is detached and closed here, so they are no longer recorded.
        """
        self.stop_sampling()
        self.session.stop()
        self.channel.close()
        sink, self.controller.sink = self.controller.sink, None
        close = getattr(sink, "close", None)
        if close is not None:
            close()

    # ------------------------------------------------------------------ event loop
    def dispatch(self, item: object) -> None:
        if isinstance(item, SampleArrived):
            self.controller.on_sample(item.sample)
        elif isinstance(item, TRANSPORT_EVENT_TYPES):
            self.session.handle_transport_event(item)
        elif isinstance(item, LINK_NOTIFICATION_TYPES):
            self._on_link_notification(item)
        else:
            logger.warning("Ignoring unknown notification %r", item)

    def process_pending(self, max_items: Optional[int] = None) -> int:
        """Dispatch queued notifications without blocking; return how many ran."""
        handled = 0
        while max_items is None or handled < max_items:
            item = self.channel.get_nowait()
            if item is None:
                break
            self.dispatch(item)
            handled += 1
        return handled

    def run(self, stop_event: Optional[threading.Event] = None, *, poll_interval: float = 0.1) -> None:
        """Dispatch notifications until the channel closes or ``stop_event`` is set."""
        while stop_event is None or not stop_event.is_set():
            item = self.channel.get(timeout=poll_interval)
            if item is None:
                if self.channel.closed:
                    break
                continue
            self.dispatch(item)

    def _on_link_notification(self, note: LinkNotification) -> None:
        if isinstance(note, LinkStateChanged):
            logger.debug("Link state notification %s -> %s", note.previous.name, note.current.name)
        elif isinstance(note, PeerNameResolved):
            logger.info("Peer is %s", note.name)
        elif isinstance(note, InboundData):
            logger.debug("Received %d bytes: %r", note.byte_count, note.text())
        elif isinstance(note, InfoMessage):
            logger.info(note.text)

        for listener in list(self._listeners):
            try:
                listener(note)
            except Exception:
                logger.exception("Link listener %r failed", listener)
