"""State machine around a point-to-point transport."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ..errors import LinkStateError, NotConnectedError
from .events import (
    BytesReceived,
    ConnectFailed,
    Connected,
    InboundData,
    InfoMessage,
    LinkLost,
    LinkState,
    LinkStateChanged,
    PeerNameResolved,
    TransportEvent,
    WriteFailed,
    Written,
)
from .transport import Transport

logger = logging.getLogger(__name__)

NotifyFn = Callable[[Any], Any]

MSG_CONNECT_FAILED = "Unable to connect device"
MSG_CONNECTION_LOST = "Device connection was lost"


class LinkSession:
    """
    Track the link state and decide whether records may be sent.

    All methods are meant to be called from one thread (the owner's
    notification loop). Transport outcomes come back through
    :meth:`handle_transport_event`; state changes, the peer name and
    inbound bytes are reported through ``notify``.

    Each transport request is tagged with a fresh token. Events carrying an
    older token belong to a cancelled attempt or a dropped connection and
    are ignored.
    """

    def __init__(self, transport: Transport, notify: NotifyFn) -> None:
        self._transport = transport
        self._notify = notify
        self._state = LinkState.NONE
        self._token = 0
        self._peer_name: Optional[str] = None
        self._listen_mode = False
        self._stopped = False

    # ------------------------------------------------------------------ properties
    @property
    def state(self) -> LinkState:
        return self._state

    @property
    def peer_name(self) -> Optional[str]:
        return self._peer_name

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    @property
    def is_connected(self) -> bool:
        return self._state == LinkState.CONNECTED

    # ------------------------------------------------------------------ requests
    def start(self) -> None:
        """Begin accepting incoming connections (``NONE`` -> ``LISTEN``)."""
        self._ensure_not_stopped("start")
        self._listen_mode = True
        if self._state != LinkState.NONE:
            logger.debug("start() ignored in state %s", self._state.name)
            return
        self._listen_or_idle()

    def connect(self, address: str) -> None:
        """Open an outgoing connection to ``address``."""
        self._ensure_not_stopped("connect")
        if self._state in (LinkState.CONNECTING, LinkState.CONNECTED):
            raise LinkStateError(f"cannot connect while {self._state.name}")
        token = self._next_token()
        logger.info("Connecting to %s", address)
        self._set_state(LinkState.CONNECTING)
        self._transport.connect(address, token)

    def send(self, data: bytes) -> None:
        """
        Hand ``data`` to the transport.

        Raises
        ------
        NotConnectedError
            Immediately, without queueing, unless the state is ``CONNECTED``.
        """
        if self._state != LinkState.CONNECTED:
            raise NotConnectedError(f"link is {self._state.name}, not CONNECTED")
        if not data:
            return
        self._transport.write(data, self._token)

    def stop(self) -> None:
        """Tear the session down. Terminal: the instance cannot be restarted."""
        if self._stopped:
            return
        self._stopped = True
        self._listen_mode = False
        self._next_token()
        self._peer_name = None
        try:
            self._transport.close()
        finally:
            self._set_state(LinkState.NONE)

    # ------------------------------------------------------------------ transport outcomes
    def handle_transport_event(self, event: TransportEvent) -> None:
        if self._stopped or event.token != self._token:
            logger.debug("Ignoring stale transport event %r", event)
            return

        if isinstance(event, Connected):
            self._on_connected(event)
        elif isinstance(event, ConnectFailed):
            self._on_connect_failed(event)
        elif isinstance(event, (LinkLost, WriteFailed)):
            self._on_link_lost(event.reason)
        elif isinstance(event, BytesReceived):
            if self._state == LinkState.CONNECTED:
                self._notify(InboundData(event.data))
        elif isinstance(event, Written):
            logger.debug("Wrote %d bytes", event.byte_count)
        else:
            raise TypeError(f"unknown transport event {event!r}")

    def _on_connected(self, event: Connected) -> None:
        if self._state not in (LinkState.CONNECTING, LinkState.LISTEN):
            logger.debug("Unexpected connection in state %s", self._state.name)
            return
        self._peer_name = event.peer_name
        self._notify(PeerNameResolved(event.peer_name))
        self._set_state(LinkState.CONNECTED)
        self._notify(InfoMessage(f"Connected to {event.peer_name}"))

    def _on_connect_failed(self, event: ConnectFailed) -> None:
        if self._state != LinkState.CONNECTING:
            return
        logger.warning("Connect failed: %s", event.reason)
        self._notify(InfoMessage(MSG_CONNECT_FAILED))
        self._listen_or_idle()

    def _on_link_lost(self, reason: str) -> None:
        if self._state == LinkState.CONNECTED:
            logger.warning("Link to %s lost: %s", self._peer_name, reason)
            self._peer_name = None
            self._transport.disconnect()
            self._notify(InfoMessage(MSG_CONNECTION_LOST))
            self._listen_or_idle()
        elif self._state == LinkState.LISTEN:
            # The listener itself failed; do not spin on re-listening.
            logger.warning("Listening failed: %s", reason)
            self._next_token()
            self._set_state(LinkState.NONE)

    # ------------------------------------------------------------------ helpers
    def _listen_or_idle(self) -> None:
        if self._listen_mode and self._transport.supports_listen:
            token = self._next_token()
            self._set_state(LinkState.LISTEN)
            self._transport.listen(token)
        else:
            self._next_token()
            self._set_state(LinkState.NONE)

    def _next_token(self) -> int:
        self._token += 1
        return self._token

    def _set_state(self, state: LinkState) -> None:
        previous = self._state
        if previous == state:
            return
        self._state = state
        logger.info("Link state %s -> %s", previous.name, state.name)
        self._notify(LinkStateChanged(previous, state))

    def _ensure_not_stopped(self, op: str) -> None:
        if self._stopped:
            raise LinkStateError(f"cannot {op}: session has been stopped")
