from __future__ import annotations

import io
import sys
from pathlib import Path

from motionlink import cli
from motionlink.cli import _build_parser, main


def test_parser_defaults() -> None:
    args = _build_parser().parse_args([])
    assert args.source == "stdin"
    assert args.connect is None
    assert args.no_listen is False
    assert args.sample_rate == 100.0


def test_parser_normalizes_log_level() -> None:
    args = _build_parser().parse_args(["--log-level", "debug", "--source", "synthetic"])
    assert args.log_level == "DEBUG"
    assert args.source == "synthetic"


def test_main_consumes_stdin_and_records_raw_samples(tmp_path: Path, monkeypatch) -> None:
    lines = "".join(f"{i * 10_000_000},0.1,0.2,9.8\n" for i in range(20))
    monkeypatch.setattr(sys, "stdin", io.StringIO("timestamp_ns,ax,ay,az\n" + lines))
    raw = tmp_path / "raw.csv"

    assert main(["--no-listen", "--raw-csv", str(raw)]) == 0

    rows = raw.read_text(encoding="utf-8").splitlines()
    assert rows[0] == "timestamp,x,y,z"
    assert len(rows) == 21


class _RemoteSensor:
    instances = []

    def __init__(self, target, **kwargs) -> None:
        self.target = target
        self.closed = False
        self.commands = []
        _RemoteSensor.instances.append(self)

    def exec_stream(self, command, cwd=None, stderr_callback=None):
        self.commands.append(command)
        return iter(["0,0.0,0.0,9.8", "10000000,0.0,0.0,9.8"])

    def close(self) -> None:
        self.closed = True


def test_main_closes_ssh_source_client_on_exit(monkeypatch) -> None:
    monkeypatch.setattr(cli, "SSHClient", _RemoteSensor)
    _RemoteSensor.instances.clear()

    assert main(["--no-listen", "--source", "ssh", "--source-host", "pi@sensor", "--source-command", "cat log"]) == 0

    (client,) = _RemoteSensor.instances
    assert client.target.host == "sensor"
    assert client.commands == ["cat log"]
    assert client.closed
