from __future__ import annotations

from typing import Optional, Protocol

from .commands import CommandSpec


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


# ---- Ports (Hexagonal boundaries) ----
class CommandPort(Protocol):
    """Blocking POST of one command against the server-manager API.

    Returns the response body text; raises ``ApiError`` subclasses on
    transport failure.
    """

    def post_command(self, spec: CommandSpec) -> str: ...
    def close(self) -> None: ...


class CommandPortFactory(Protocol):
    """Build one ``CommandPort`` per issued command so it can be aborted alone."""

    def __call__(self) -> CommandPort: ...


class UserNameStoragePort(Protocol):
    """Persistence for the user name (on-device storage)."""

    def load_user_name(self) -> Optional[str]: ...
    def save_user_name(self, name: str) -> None: ...
