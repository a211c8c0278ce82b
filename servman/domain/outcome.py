"""Terminal result of one issued command."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeVar, Union

R = TypeVar("R")


@dataclass(frozen=True)
class Success:
    """Response body returned by the remote service."""

    body: str

    @property
    def text(self) -> str:
        return self.body


@dataclass(frozen=True)
class Failure:
    """Human-readable rendering of the error that ended the command."""

    error: str

    @property
    def text(self) -> str:
        return self.error


Outcome = Union[Success, Failure]


def fold_outcome(
    outcome: Outcome,
    on_success: Callable[[str], R],
    on_failure: Callable[[str], R],
) -> R:
    """Dispatch an outcome to the matching text callback."""
    if isinstance(outcome, Success):
        return on_success(outcome.body)
    if isinstance(outcome, Failure):
        return on_failure(outcome.error)
    raise TypeError(f"Not an Outcome: {outcome!r}")


__all__ = ["Failure", "Outcome", "Success", "fold_outcome"]
