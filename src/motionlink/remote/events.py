"""Event types exchanged between transports, the link session, and its owner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Union


class LinkState(IntEnum):
    NONE = 0  # idle
    LISTEN = 1  # waiting for an incoming connection
    CONNECTING = 2  # outgoing connection in progress
    CONNECTED = 3  # peer attached, sends allowed


# ------------------------------------------------------------------ transport -> session
@dataclass(frozen=True, slots=True)
class Connected:
    token: int
    peer_name: str


@dataclass(frozen=True, slots=True)
class ConnectFailed:
    token: int
    reason: str


@dataclass(frozen=True, slots=True)
class LinkLost:
    token: int
    reason: str


@dataclass(frozen=True, slots=True)
class BytesReceived:
    token: int
    data: bytes

    @property
    def byte_count(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class Written:
    token: int
    byte_count: int


@dataclass(frozen=True, slots=True)
class WriteFailed:
    token: int
    reason: str


TransportEvent = Union[Connected, ConnectFailed, LinkLost, BytesReceived, Written, WriteFailed]
TRANSPORT_EVENT_TYPES = (Connected, ConnectFailed, LinkLost, BytesReceived, Written, WriteFailed)


# ------------------------------------------------------------------ session -> owner
@dataclass(frozen=True, slots=True)
class LinkStateChanged:
    previous: LinkState
    current: LinkState


@dataclass(frozen=True, slots=True)
class PeerNameResolved:
    name: str


@dataclass(frozen=True, slots=True)
class InboundData:
    data: bytes

    @property
    def byte_count(self) -> int:
        return len(self.data)

    def text(self, encoding: str = "utf-8") -> str:
        return self.data.decode(encoding, errors="replace")


@dataclass(frozen=True, slots=True)
class InfoMessage:
    text: str


LinkNotification = Union[LinkStateChanged, PeerNameResolved, InboundData, InfoMessage]
LINK_NOTIFICATION_TYPES = (LinkStateChanged, PeerNameResolved, InboundData, InfoMessage)
