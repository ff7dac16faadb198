"""Factory helpers that wire a :class:`SenderService` from configuration."""

from __future__ import annotations

import logging
from typing import Optional

from ..config import MotionLinkConfig
from ..dataio.csv_writer import CsvSampleSink
from ..remote.ssh_transport import SSHTransport
from ..remote.tcp_transport import TcpTransport
from ..remote.transport import Transport
from .service import SenderService

logger = logging.getLogger(__name__)


def build_transport(cfg: MotionLinkConfig) -> Transport:
    """Create the link transport named by ``cfg.transport``."""
    if cfg.transport == "ssh":
        return SSHTransport(
            command=cfg.ssh_command,
            default_user=cfg.ssh_user,
            password=cfg.ssh_password,
            port=cfg.ssh_port,
            write_queue_size=cfg.write_queue_size,
            connect_timeout=cfg.connect_timeout,
        )
    return TcpTransport(
        cfg.device_name,
        listen_host=cfg.listen_host,
        listen_port=cfg.listen_port,
        write_queue_size=cfg.write_queue_size,
        connect_timeout=cfg.connect_timeout,
    )


def build_service(
    cfg: MotionLinkConfig,
    *,
    transport: Optional[Transport] = None,
) -> SenderService:
    """
    Build a :class:`SenderService` ready for a source to be attached.

    Parameters
    ----------
    cfg:
        Runtime configuration (usually loaded from YAML).
    transport:
        Pre-built transport. When omitted one is created from
        ``cfg.transport`` via :func:`build_transport`.
    """
    normalized = cfg.sanitized()

    if transport is None:
        transport = build_transport(normalized)

    sink = CsvSampleSink(normalized.raw_csv_path) if normalized.raw_csv_path else None

    service = SenderService(
        transport,
        window_size=normalized.window_size,
        seconds_per_tick=normalized.seconds_per_tick,
        sink=sink,
    )
    logger.debug(
        "Built service: window=%d tick=%g transport=%s raw_csv=%s",
        normalized.window_size,
        normalized.seconds_per_tick,
        type(transport).__name__,
        normalized.raw_csv_path,
    )
    return service


__all__ = ["build_service", "build_transport"]
