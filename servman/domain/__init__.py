"""Domain package exports for command and outcome value objects."""

from .commands import (
    Command,
    CommandSpec,
    CommandTable,
    build_command_table,
    build_request_body,
)
from .outcome import Failure, Outcome, Success, fold_outcome
from .ports import CommandPort, UseCaseError, UserNameStoragePort

__all__ = [
    "Command",
    "CommandPort",
    "CommandSpec",
    "CommandTable",
    "Failure",
    "Outcome",
    "Success",
    "UseCaseError",
    "UserNameStoragePort",
    "build_command_table",
    "build_request_body",
    "fold_outcome",
]
