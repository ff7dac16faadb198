from __future__ import annotations

from typing import Any, List, Optional, Tuple

import pytest


class FakeTransport:
    """Records requests; tests push events back through ``emit``."""

    def __init__(self, supports_listen: bool = True) -> None:
        self.supports_listen = supports_listen
        self.emit = None
        self.calls: List[Tuple[str, Any]] = []
        self.writes: List[Tuple[bytes, int]] = []
        self.listen_token: Optional[int] = None
        self.connect_token: Optional[int] = None
        self.closed = False

    def bind(self, emit) -> None:
        self.emit = emit

    def listen(self, token: int) -> None:
        self.listen_token = token
        self.calls.append(("listen", token))

    def connect(self, address: str, token: int) -> None:
        self.connect_token = token
        self.calls.append(("connect", address))

    def write(self, data: bytes, token: int) -> None:
        self.writes.append((data, token))

    def disconnect(self) -> None:
        self.calls.append(("disconnect", None))

    def close(self) -> None:
        self.closed = True
        self.calls.append(("close", None))


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()
