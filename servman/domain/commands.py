"""Typed command table for the remote server-manager API."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional


class Command(str, Enum):
    """One of the three fixed remote operations."""

    HEALTH = "health"
    START = "start"
    STOP = "stop"


@dataclass(frozen=True)
class CommandSpec:
    """URL path and timeout policy for one command.

    ``None`` timeouts mean "use the transport defaults".
    """

    command: Command
    path: str
    connect_timeout_ms: Optional[int] = None
    read_timeout_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.path.startswith("/"):
            raise ValueError(f"CommandSpec path must start with '/': {self.path!r}")
        for name in ("connect_timeout_ms", "read_timeout_ms"):
            value = getattr(self, name)
            if value is not None and int(value) <= 0:
                raise ValueError(f"{name} must be positive, got {value!r}")


CommandTable = Mapping[Command, CommandSpec]


def build_command_table(
    *, connect_timeout_ms: int = 5000, read_timeout_ms: int = 60000
) -> Dict[Command, CommandSpec]:
    """Return the command table; start/stop share the supplied timeout policy."""
    return {
        Command.HEALTH: CommandSpec(Command.HEALTH, "/health"),
        Command.START: CommandSpec(
            Command.START,
            "/start",
            connect_timeout_ms=connect_timeout_ms,
            read_timeout_ms=read_timeout_ms,
        ),
        Command.STOP: CommandSpec(
            Command.STOP,
            "/stop",
            connect_timeout_ms=connect_timeout_ms,
            read_timeout_ms=read_timeout_ms,
        ),
    }


def build_request_body(api_key: str) -> Dict[str, str]:
    """Return the JSON body every command carries."""
    return {"apiKey": api_key}


__all__ = [
    "Command",
    "CommandSpec",
    "CommandTable",
    "build_command_table",
    "build_request_body",
]
