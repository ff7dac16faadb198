"""Configuration objects and helpers for motionlink.

Settings live in a YAML file (optionally nested under a ``motionlink:`` key)
and load into the typed :class:`MotionLinkConfig` dataclass, which the CLI
and :func:`motionlink.core.wiring.build_service` use to size the analysis
window and pick the link transport.
"""

from .runtime import MotionLinkConfig, config_from_mapping, load_config

__all__ = ["MotionLinkConfig", "config_from_mapping", "load_config"]
