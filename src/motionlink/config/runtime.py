"""Runtime configuration for the sampler and its link."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

import yaml

TRANSPORTS = ("tcp", "ssh")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True)
class MotionLinkConfig:
    """
    Tuning knobs for sampling, analysis and the peer link.

    Defaults assume an accelerometer with nanosecond timestamps, 128-sample
    windows, and a TCP peer on the local network.
    """

    window_size: int = 128
    seconds_per_tick: float = 1e-9

    transport: str = "tcp"
    device_name: Optional[str] = None
    listen_host: str = "0.0.0.0"
    listen_port: int = 5050
    listen_on_start: bool = True
    peer_address: Optional[str] = None
    connect_timeout: float = 10.0
    write_queue_size: int = 32

    ssh_user: str = "pi"
    ssh_password: Optional[str] = None
    ssh_port: int = 22
    ssh_command: str = "cat >> motionlink_features.csv"

    raw_csv_path: Optional[str] = None
    log_level: str = "INFO"

    def sanitized(self) -> MotionLinkConfig:
        """Return a copy with types coerced and limits applied."""
        transport = str(self.transport).strip().lower()
        if transport not in TRANSPORTS:
            raise ValueError(f"transport must be one of {TRANSPORTS}, got {self.transport!r}")
        level = str(self.log_level).strip().upper()
        if level not in LOG_LEVELS:
            level = "INFO"
        tick = float(self.seconds_per_tick)
        if tick <= 0:
            raise ValueError(f"seconds_per_tick must be > 0, got {tick}")
        return MotionLinkConfig(
            # Power-of-two check happens when the analyzer is built.
            window_size=int(self.window_size),
            seconds_per_tick=tick,
            transport=transport,
            device_name=str(self.device_name) if self.device_name else None,
            listen_host=str(self.listen_host),
            listen_port=max(0, min(65535, int(self.listen_port))),
            listen_on_start=bool(self.listen_on_start),
            peer_address=str(self.peer_address) if self.peer_address else None,
            connect_timeout=max(0.1, float(self.connect_timeout)),
            write_queue_size=max(1, int(self.write_queue_size)),
            ssh_user=str(self.ssh_user),
            ssh_password=str(self.ssh_password) if self.ssh_password else None,
            ssh_port=max(1, min(65535, int(self.ssh_port))),
            ssh_command=str(self.ssh_command),
            raw_csv_path=str(self.raw_csv_path) if self.raw_csv_path else None,
            log_level=level,
        )


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`MotionLinkConfig`."""
    return {f.name for f in fields(MotionLinkConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten a top-level ``motionlink`` block into the root mapping."""
    if "motionlink" in data and isinstance(data["motionlink"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "motionlink":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> MotionLinkConfig:
    """Build :class:`MotionLinkConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return MotionLinkConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return MotionLinkConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> MotionLinkConfig:
    """
    Load configuration from a YAML file at ``path``.

    Missing files fall back to default :class:`MotionLinkConfig`.
    """
    if path is None:
        return MotionLinkConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return MotionLinkConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["MotionLinkConfig", "config_from_mapping", "load_config"]
