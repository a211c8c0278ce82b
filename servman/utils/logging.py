"""Root logger setup shared by the Tk app and the CLI.

Environment overrides (checked in this order):
    - ``SERVMAN_LOG_LEVEL``: level name or number, e.g. ``debug`` or ``10``.
    - ``SERVMAN_DEBUG_LOGGING`` / ``SERVMAN_DEBUG``: truthy value forces DEBUG.

``urllib3`` (pulled in by ``requests``) logs every connection at DEBUG; it is
held at WARNING unless the effective level is DEBUG.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"
ENV_LEVEL = "SERVMAN_LOG_LEVEL"
ENV_DEBUG_FLAGS = ("SERVMAN_DEBUG_LOGGING", "SERVMAN_DEBUG")
_TRUTHY = {"1", "true", "yes", "on"}
_TRANSPORT_LOGGERS = ("urllib3",)


def parse_level(value: object, fallback: int = logging.INFO) -> int:
    """Turn ``"warning"``, ``"30"`` or ``30`` into a logging level."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value or "").strip()
    if not text:
        return fallback
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else fallback


def resolve_env_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Return the level forced by the environment, or ``None``."""
    env = os.environ if environ is None else environ
    explicit = env.get(ENV_LEVEL)
    if explicit and explicit.strip():
        return parse_level(explicit)
    for flag in ENV_DEBUG_FLAGS:
        if (env.get(flag) or "").strip().lower() in _TRUTHY:
            return logging.DEBUG
    return None


def env_forces_debug(environ: Optional[Mapping[str, str]] = None) -> bool:
    level = resolve_env_level(environ)
    return level is not None and level <= logging.DEBUG


def configure_root(
    default_level: int | str = logging.INFO,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Install the compact format once and set the effective root level.

    Returns:
        The level applied to the root logger.
    """
    level = resolve_env_level(environ)
    if level is None:
        level = parse_level(default_level)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    _set_level(level)
    return level


def apply_debug_preference(
    debug_enabled: bool,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Switch between DEBUG and INFO from settings; the environment still wins."""
    level = resolve_env_level(environ)
    if level is None:
        level = logging.DEBUG if debug_enabled else logging.INFO
    _set_level(level)
    return level


def _set_level(level: int) -> None:
    logging.getLogger().setLevel(level)
    transport_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)


__all__ = [
    "apply_debug_preference",
    "configure_root",
    "env_forces_debug",
    "parse_level",
    "resolve_env_level",
]
