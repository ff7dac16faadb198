"""Command-line entry point: sample, analyze, and stream feature records to a peer."""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import ExitStack
from typing import Sequence

from .config import MotionLinkConfig, load_config
from .config.runtime import LOG_LEVELS
from .core.service import SenderService
from .core.wiring import build_service
from .remote.events import InboundData, InfoMessage, LinkNotification
from .remote.ssh_client import SSHClient, parse_ssh_address
from .sensors.source import LineSampleSource, ThreadedSource
from .sensors.synthetic import SyntheticSignal, SyntheticSource

logger = logging.getLogger("motionlink")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="motionlink",
        description="Turn accelerometer windows into feature records and send them to a paired peer.",
    )
    parser.add_argument("-c", "--config", default=None, help="YAML configuration file.")
    parser.add_argument(
        "--connect",
        metavar="ADDRESS",
        default=None,
        help="Peer to connect to (host:port for tcp, [user@]host[:port] for ssh).",
    )
    parser.add_argument(
        "--no-listen",
        action="store_true",
        help="Do not accept incoming connections while idle.",
    )
    parser.add_argument(
        "-s",
        "--source",
        choices=("stdin", "synthetic", "ssh"),
        default="stdin",
        help="Where samples come from (default: %(default)s).",
    )
    parser.add_argument(
        "--source-host",
        metavar="ADDRESS",
        default=None,
        help="Sensor host for --source ssh ([user@]host[:port]).",
    )
    parser.add_argument(
        "--source-command",
        default="python3 mpu6050_stream.py",
        help="Remote command printing samples for --source ssh (default: %(default)s).",
    )
    parser.add_argument(
        "--synthetic-hz",
        type=float,
        default=4.0,
        help="Oscillation frequency on X for --source synthetic (default: %(default)s).",
    )
    parser.add_argument(
        "--sample-rate",
        type=float,
        default=100.0,
        help="Sample rate in Hz for --source synthetic (default: %(default)s).",
    )
    parser.add_argument("--raw-csv", default=None, help="Also append raw samples to this CSV file.")
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (overrides the config file).",
    )
    return parser


def _build_source(
    args: argparse.Namespace, service: SenderService, resources: ExitStack
) -> ThreadedSource:
    post = service.channel.post
    if args.source == "synthetic":
        signal = SyntheticSignal(
            rate_hz=args.sample_rate,
            frequencies_hz=(args.synthetic_hz, 0.0, 0.0),
        )
        return SyntheticSource(signal, post)

    if args.source == "ssh":
        if not args.source_host:
            raise SystemExit("--source ssh requires --source-host")
        client = SSHClient(parse_ssh_address(args.source_host))
        resources.callback(client.close)

        def open_remote():
            return client.exec_stream(
                args.source_command,
                stderr_callback=lambda line: logger.warning("[sensor] %s", line.rstrip()),
            )

        return LineSampleSource(open_remote, post)

    return LineSampleSource(lambda: sys.stdin, post)


def _print_notification(note: LinkNotification) -> None:
    if isinstance(note, InfoMessage):
        print(note.text, flush=True)
    elif isinstance(note, InboundData):
        print(f"<< {note.text().rstrip()}", flush=True)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    cfg = load_config(args.config)
    if args.raw_csv:
        cfg.raw_csv_path = args.raw_csv
    if args.no_listen:
        cfg.listen_on_start = False
    if args.connect:
        cfg.peer_address = args.connect
    cfg = cfg.sanitized()

    logging.basicConfig(
        level=args.log_level or cfg.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    with ExitStack() as resources:
        service = build_service(cfg)
        service.add_listener(_print_notification)
        source = _build_source(args, service, resources)
        service.attach_source(source)
        _run(cfg, service, source)
    return 0


def _run(cfg: MotionLinkConfig, service: SenderService, source: ThreadedSource) -> None:
    if cfg.listen_on_start:
        service.listen()
    if cfg.peer_address:
        service.connect(cfg.peer_address)
    service.start_sampling()

    try:
        # Until the source ends and its backlog is drained.
        while source.is_alive() or len(service.channel):
            item = service.channel.get(timeout=0.2)
            if item is not None:
                service.dispatch(item)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        service.shutdown()
        service.process_pending()
        stats = service.controller.stats
        logger.info(
            "Processed %d samples in %d windows: %d records sent, %d dropped, %d degenerate",
            stats.samples,
            stats.windows,
            stats.records_sent,
            stats.records_dropped,
            stats.degenerate_windows,
        )


if __name__ == "__main__":
    raise SystemExit(main())
