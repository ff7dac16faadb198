"""Link transport that feeds records into a receiver command over SSH.

The peer runs ``command`` (for example a small script that appends records to
a file or forwards them to a local socket). Every record written by the
session becomes one newline-terminated line on the command's stdin; lines the
command prints on stdout come back as inbound data.
"""

from __future__ import annotations

import logging
import threading
from queue import Queue
from typing import Callable, Optional

from ..errors import LinkStateError
from .events import BytesReceived, ConnectFailed, Connected, LinkLost, WriteFailed, Written
from .ssh_client import LineStream, SSHClient, SSHTarget, parse_ssh_address
from .transport import EmitFn, offer_queue

logger = logging.getLogger(__name__)

DEFAULT_RECEIVER_COMMAND = "cat >> motionlink_features.csv"

ClientFactory = Callable[[SSHTarget], SSHClient]


class _SshLink:
    """One running receiver command plus its stdout reader and stdin writer."""

    def __init__(self, client: SSHClient, stream: LineStream, token: int, emit: EmitFn, queue_size: int) -> None:
        self.client = client
        self.stream = stream
        self.token = token
        self._emit = emit
        self._queue: Queue[Optional[bytes]] = Queue(maxsize=max(1, queue_size))
        self._closed = threading.Event()

    def start(self) -> None:
        threading.Thread(target=self._read_loop, name="ssh-link-reader", daemon=True).start()
        threading.Thread(target=self._write_loop, name="ssh-link-writer", daemon=True).start()

    def enqueue(self, data: bytes) -> None:
        offer_queue(self._queue, bytes(data))

    def _read_loop(self) -> None:
        for line in self.stream:
            if self._closed.is_set():
                return
            self._emit(BytesReceived(self.token, line.encode("utf-8")))
        if not self._closed.is_set():
            self._emit(LinkLost(self.token, "remote command exited"))

    def _write_loop(self) -> None:
        while True:
            data = self._queue.get()
            if data is None or self._closed.is_set():
                return
            try:
                self.stream.write(data + b"\n")
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
        self.stream.close()
        self.client.close()


class SSHTransport:
    """
    Outgoing-only transport built on :class:`SSHClient`.

    ``connect()`` takes ``[user@]host[:port]``; the peer display name is
    ``user@host``. Listening is not supported.
    """

    supports_listen = False

    def __init__(
        self,
        *,
        command: str = DEFAULT_RECEIVER_COMMAND,
        default_user: str = "pi",
        password: Optional[str] = None,
        port: int = 22,
        write_queue_size: int = 32,
        connect_timeout: float = 10.0,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.command = command
        self.default_user = default_user
        self.password = password
        self.port = int(port)
        self.write_queue_size = int(write_queue_size)
        self.connect_timeout = float(connect_timeout)
        self._client_factory = client_factory or (lambda target: SSHClient(target, timeout=self.connect_timeout))

        self._emit: Optional[EmitFn] = None
        self._lock = threading.Lock()
        self._link: Optional[_SshLink] = None
        self._pending: Optional[int] = None
        self._closed = False

    def bind(self, emit: EmitFn) -> None:
        self._emit = emit

    def _post(self, event) -> None:
        if self._emit is None:
            raise RuntimeError("transport is not bound; call bind() first")
        self._emit(event)

    def listen(self, token: int) -> None:
        raise LinkStateError("SSHTransport cannot accept incoming connections")

    def connect(self, address: str, token: int) -> None:
        self.disconnect()
        with self._lock:
            self._pending = token
        threading.Thread(
            target=self._connect_worker, args=(address, token), name="ssh-link-connect", daemon=True
        ).start()

    def _connect_worker(self, address: str, token: int) -> None:
        client: Optional[SSHClient] = None
        try:
            target = parse_ssh_address(
                address, default_user=self.default_user, default_port=self.port, password=self.password
            )
            client = self._client_factory(target)
            client.connect()
            stream = client.exec_stream(self.command, stderr_callback=self._log_remote_stderr)
        except Exception as exc:  # paramiko raises a wide range of errors here
            logger.debug("SSH connect to %s failed", address, exc_info=True)
            if client is not None:
                client.close()
            self._post(ConnectFailed(token, str(exc) or type(exc).__name__))
            return

        link = _SshLink(client, stream, token, self._post, self.write_queue_size)
        with self._lock:
            if self._closed or self._pending != token:
                link.close()
                return
            self._pending = None
            self._link = link
        self._post(Connected(token, target.display_name))
        link.start()

    @staticmethod
    def _log_remote_stderr(line: str) -> None:
        logger.warning("receiver stderr: %s", line)

    def write(self, data: bytes, token: int) -> None:
        with self._lock:
            link = self._link
        if link is None or link.token != token:
            self._post(WriteFailed(token, "no active connection"))
            return
        link.enqueue(data)

    def disconnect(self) -> None:
        with self._lock:
            link, self._link = self._link, None
            self._pending = None
        if link is not None:
            link.close()

    def close(self) -> None:
        with self._lock:
            self._closed = True
        self.disconnect()
