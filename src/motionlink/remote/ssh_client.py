"""Thin paramiko wrapper used by the SSH link and the remote sensor source."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Optional

import logging
import paramiko
import shlex
import threading


logger = logging.getLogger(__name__)


@dataclass
class SSHTarget:
    """Connection details for a remote peer (password-based auth only)."""

    host: str
    user: str
    port: int = 22
    password: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.user}@{self.host}"


def parse_ssh_address(
    address: str,
    *,
    default_user: str = "pi",
    default_port: int = 22,
    password: Optional[str] = None,
) -> SSHTarget:
    """Parse ``[user@]host[:port]`` into an :class:`SSHTarget`."""
    text = address.strip()
    if not text:
        raise ValueError("empty SSH address")
    user, sep, rest = text.rpartition("@")
    if not sep:
        user, rest = default_user, text
    host, sep, port = rest.rpartition(":")
    if not sep:
        host, port = rest, ""
    return SSHTarget(
        host=host,
        user=user or default_user,
        port=int(port) if port else default_port,
        password=password,
    )


class LineStream(Iterator[str]):
    """
    Iterator over stdout lines of a remote command.

    ``close()`` tears down the channel; iteration then stops.
    """

    def __init__(
        self,
        stdin: paramiko.ChannelFile,
        stdout: paramiko.ChannelFile,
        stderr: paramiko.ChannelFile,
        *,
        encoding: str = "utf-8",
        errors: str = "ignore",
        stderr_callback: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.stdin = stdin
        self._stdout = stdout
        self._stderr = stderr
        self._encoding = encoding
        self._errors = errors
        self._stderr_callback = stderr_callback
        self._closed = False
        if stderr_callback is not None:
            threading.Thread(target=self._watch_stderr, name="ssh-stderr", daemon=True).start()

    def __iter__(self) -> "LineStream":
        return self

    def __next__(self) -> str:
        while True:
            if self._closed:
                raise StopIteration
            try:
                raw = self._stdout.readline()
            except OSError:
                self.close()
                raise StopIteration
            if raw in ("", b""):
                self.close()
                raise StopIteration
            text = raw.decode(self._encoding, errors=self._errors) if isinstance(raw, bytes) else raw
            line = text.rstrip("\r\n")
            if line:
                return line

    def write(self, data: bytes) -> None:
        """Send raw bytes to the command's stdin."""
        self.stdin.write(data)
        self.stdin.flush()

    @property
    def closed(self) -> bool:
        return self._closed

    def _watch_stderr(self) -> None:
        assert self._stderr_callback is not None
        try:
            for raw_err in iter(self._stderr.readline, ""):
                if not raw_err:
                    break
                text_err = (
                    raw_err.decode(self._encoding, errors=self._errors)
                    if isinstance(raw_err, bytes)
                    else raw_err
                ).rstrip("\r\n")
                if text_err:
                    try:
                        self._stderr_callback(text_err)
                    except Exception:
                        logger.exception("Error handling stderr callback")
        except OSError:
            logger.debug("Remote stderr closed", exc_info=True)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for stream in (self._stdout, self.stdin, self._stderr):
            try:
                stream.close()
            except OSError:
                pass
        channel = getattr(self._stdout, "channel", None)
        if channel is not None:
            channel.close()


class SSHClient:
    """Simple wrapper around ``paramiko`` for running remote commands."""

    def __init__(self, target: SSHTarget, *, timeout: float = 10.0) -> None:
        self.target = target
        self.timeout = float(timeout)
        self._client: paramiko.SSHClient = paramiko.SSHClient()
        self._client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    # ------------------------------------------------------------------ connection
    def _ensure_client(self) -> paramiko.SSHClient:
        transport = self._client.get_transport()
        if not (transport and transport.is_active()):
            self.connect()
        return self._client

    def connect(self) -> None:
        transport = self._client.get_transport()
        if transport and transport.is_active():
            return

        logger.info(
            "Connecting to %s@%s:%s", self.target.user, self.target.host, self.target.port
        )

        self._client.connect(
            hostname=self.target.host,
            username=self.target.user,
            port=self.target.port,
            password=self.target.password,
            look_for_keys=False,
            allow_agent=False,
            timeout=self.timeout,
        )

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------ commands
    def exec_stream(
        self,
        command: str,
        cwd: Optional[str] = None,
        stderr_callback: Optional[Callable[[str], None]] = None,
    ) -> LineStream:
        """
        Start a long-lived command and return its stdout as a :class:`LineStream`.

        The stream's ``write()`` feeds the command's stdin.
        """
        client = self._ensure_client()
        full_cmd = command
        if cwd:
            full_cmd = f"cd {shlex.quote(cwd)} && {command}"
        stdin, stdout, stderr = client.exec_command(full_cmd)
        return LineStream(stdin, stdout, stderr, stderr_callback=stderr_callback)
