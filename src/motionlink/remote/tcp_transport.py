"""Length-prefixed TCP transport with single-peer listen and connect."""

from __future__ import annotations

import logging
import socket
import struct
import threading
from queue import Queue
from typing import Optional, Tuple

from .events import BytesReceived, ConnectFailed, Connected, LinkLost, WriteFailed, Written
from .transport import EmitFn, offer_queue

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5050
MAX_FRAME_BYTES = 1 << 20
ACCEPT_POLL_SECONDS = 0.5
_HEADER = struct.Struct("!I")


def parse_address(address: str, default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    """
    Split ``host[:port]`` (IPv6 hosts in brackets: ``[::1]:5050``).
    """
    text = address.strip()
    if text.startswith("["):
        host, _, rest = text[1:].partition("]")
        port = rest.lstrip(":")
        return host, int(port) if port else default_port
    host, sep, port = text.rpartition(":")
    if not sep:
        return text, default_port
    return host, int(port)


def send_frame(sock: socket.socket, payload: bytes) -> None:
    sock.sendall(_HEADER.pack(len(payload)) + payload)


def _recv_exact(sock: socket.socket, size: int) -> Optional[bytes]:
    chunks = bytearray()
    while len(chunks) < size:
        chunk = sock.recv(size - len(chunks))
        if not chunk:
            return None
        chunks.extend(chunk)
    return bytes(chunks)


def recv_frame(sock: socket.socket) -> Optional[bytes]:
    """Read one frame; ``None`` on a clean end of stream."""
    header = _recv_exact(sock, _HEADER.size)
    if header is None:
        return None
    (size,) = _HEADER.unpack(header)
    if size > MAX_FRAME_BYTES:
        raise ConnectionError(f"frame of {size} bytes exceeds limit")
    if size == 0:
        return b""
    payload = _recv_exact(sock, size)
    if payload is None:
        raise ConnectionError("stream ended inside a frame")
    return payload


def _handshake(sock: socket.socket, local_name: str, timeout: float) -> str:
    """Exchange display names; returns the peer's."""
    sock.settimeout(timeout)
    send_frame(sock, local_name.encode("utf-8"))
    frame = recv_frame(sock)
    if frame is None:
        raise ConnectionError("peer closed during handshake")
    sock.settimeout(None)
    return frame.decode("utf-8", errors="replace") or "unknown"


class _Connection:
    """One established socket with a reader thread and a queued writer thread."""

    def __init__(
        self,
        sock: socket.socket,
        token: int,
        peer_name: str,
        emit: EmitFn,
        queue_size: int,
    ) -> None:
        self.sock = sock
        self.token = token
        self.peer_name = peer_name
        self._emit = emit
        self._queue: Queue[Optional[bytes]] = Queue(maxsize=max(1, queue_size))
        self._closed = threading.Event()
        self._reader = threading.Thread(target=self._read_loop, name="tcp-link-reader", daemon=True)
        self._writer = threading.Thread(target=self._write_loop, name="tcp-link-writer", daemon=True)

    def start(self) -> None:
        self._reader.start()
        self._writer.start()

    def enqueue(self, data: bytes) -> None:
        offer_queue(self._queue, bytes(data))

    def _read_loop(self) -> None:
        reason = "peer closed the connection"
        try:
            while not self._closed.is_set():
                frame = recv_frame(self.sock)
                if frame is None:
                    break
                self._emit(BytesReceived(self.token, frame))
        except OSError as exc:
            reason = str(exc) or type(exc).__name__
        if not self._closed.is_set():
            self._emit(LinkLost(self.token, reason))

    def _write_loop(self) -> None:
        while True:
            data = self._queue.get()
            if data is None or self._closed.is_set():
                return
            try:
                send_frame(self.sock, data)
            except OSError as exc:
                if not self._closed.is_set():
                    self._emit(WriteFailed(self.token, str(exc) or type(exc).__name__))
                return
            self._emit(Written(self.token, len(data)))

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        offer_queue(self._queue, None)
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()


class TcpTransport:
    """
    Point-to-point link over TCP.

    Every message is one frame: a 4-byte big-endian length followed by the
    payload. The first frame in each direction carries the endpoint's
    display name. Only one peer is served at a time; the listening socket
    is closed as soon as a peer is attached.
    """

    supports_listen = True

    def __init__(
        self,
        device_name: Optional[str] = None,
        *,
        listen_host: str = "0.0.0.0",
        listen_port: int = DEFAULT_PORT,
        write_queue_size: int = 32,
        connect_timeout: float = 10.0,
    ) -> None:
        self.device_name = device_name or socket.gethostname()
        self.listen_host = listen_host
        self.listen_port = int(listen_port)
        self.write_queue_size = int(write_queue_size)
        self.connect_timeout = float(connect_timeout)

        self._emit: Optional[EmitFn] = None
        self._lock = threading.Lock()
        self._server: Optional[socket.socket] = None
        self._connection: Optional[_Connection] = None
        # Token of the listen/connect attempt allowed to attach a connection.
        self._pending: Optional[int] = None
        self._closed = False
        self.listening_address: Optional[Tuple[str, int]] = None

    def bind(self, emit: EmitFn) -> None:
        self._emit = emit

    def _post(self, event) -> None:
        if self._emit is None:
            raise RuntimeError("transport is not bound; call bind() first")
        self._emit(event)

    # ------------------------------------------------------------------ listen
    def listen(self, token: int) -> None:
        self.disconnect()
        try:
            server = socket.create_server((self.listen_host, self.listen_port))
        except OSError as exc:
            logger.error("Cannot listen on %s:%s: %s", self.listen_host, self.listen_port, exc)
            self._post(LinkLost(token, str(exc)))
            return
        with self._lock:
            self._server = server
            self._pending = token
            self.listening_address = server.getsockname()[:2]
        logger.info("Listening on %s:%s", *self.listening_address)
        threading.Thread(
            target=self._accept_loop, args=(server, token), name="tcp-link-accept", daemon=True
        ).start()

    def _accept_loop(self, server: socket.socket, token: int) -> None:
        # close() from another thread does not wake accept() on every platform.
        server.settimeout(ACCEPT_POLL_SECONDS)
        while True:
            try:
                sock, addr = server.accept()
            except TimeoutError:
                with self._lock:
                    active = self._server is server
                if not active:
                    return
                continue
            except OSError:
                # Closed by disconnect() or connect(); nothing to report.
                return
            try:
                peer_name = _handshake(sock, self.device_name, self.connect_timeout)
            except OSError as exc:
                logger.warning("Handshake with %s failed: %s", addr, exc)
                sock.close()
                continue
            self._close_server(server)
            self._attach(sock, token, peer_name)
            return

    # ------------------------------------------------------------------ connect
    def connect(self, address: str, token: int) -> None:
        self.disconnect()
        with self._lock:
            self._pending = token
        threading.Thread(
            target=self._connect_worker, args=(address, token), name="tcp-link-connect", daemon=True
        ).start()

    def _connect_worker(self, address: str, token: int) -> None:
        try:
            host, port = parse_address(address, self.listen_port)
            sock = socket.create_connection((host, port), timeout=self.connect_timeout)
        except (OSError, ValueError) as exc:
            self._post(ConnectFailed(token, str(exc) or type(exc).__name__))
            return
        try:
            peer_name = _handshake(sock, self.device_name, self.connect_timeout)
        except OSError as exc:
            sock.close()
            self._post(ConnectFailed(token, f"handshake failed: {exc}"))
            return
        self._attach(sock, token, peer_name)

    # ------------------------------------------------------------------ connection
    def _attach(self, sock: socket.socket, token: int, peer_name: str) -> None:
        with self._lock:
            if self._closed or self._pending != token:
                sock.close()
                return
            self._pending = None
            conn = _Connection(sock, token, peer_name, self._post, self.write_queue_size)
            self._connection = conn
        # Announce before the reader can report data or loss for this token.
        self._post(Connected(token, peer_name))
        conn.start()

    def write(self, data: bytes, token: int) -> None:
        with self._lock:
            conn = self._connection
        if conn is None or conn.token != token:
            self._post(WriteFailed(token, "no active connection"))
            return
        conn.enqueue(data)

    def disconnect(self) -> None:
        with self._lock:
            conn, self._connection = self._connection, None
            server, self._server = self._server, None
            self._pending = None
            self.listening_address = None
        if conn is not None:
            conn.close()
        if server is not None:
            server.close()

    def close(self) -> None:
        with self._lock:
            self._closed = True
        self.disconnect()

    def _close_server(self, server: socket.socket) -> None:
        with self._lock:
            if self._server is server:
                self._server = None
                self.listening_address = None
        server.close()
