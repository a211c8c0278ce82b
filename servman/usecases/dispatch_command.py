from __future__ import annotations

import logging
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Dict

from servman.domain.commands import Command, CommandSpec, build_command_table
from servman.domain.operations import AsyncOperation, CancelToken
from servman.domain.outcome import Failure, Outcome, Success
from servman.domain.ports import CommandPortFactory

from .error_mapping import map_api_error

_log = logging.getLogger(__name__)


@dataclass
class CommandDispatcher:
    """Issue health/start/stop as cancellable operations yielding one ``Outcome``.

    Every issued command gets its own port (and HTTP session) from
    ``port_factory`` so cancelling one exchange never touches another. Errors
    never escape: they become ``Failure`` outcomes. A cancelled command yields
    nothing at all.
    """

    port_factory: CommandPortFactory
    executor: Executor
    commands: Dict[Command, CommandSpec] = field(default_factory=build_command_table)

    def issue(self, command: Command) -> AsyncOperation[Outcome]:
        try:
            spec = self.commands[Command(command)]
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown command: {command!r}") from exc

        def _work(token: CancelToken) -> Outcome:
            return self._exchange(spec, token)

        return AsyncOperation(_work, executor=self.executor, name=f"command:{spec.command.value}")

    def _exchange(self, spec: CommandSpec, token: CancelToken) -> Outcome:
        port = self.port_factory()
        token.on_cancel(port.close)
        try:
            token.raise_if_cancelled()
            body = port.post_command(spec)
        except Exception as exc:
            token.raise_if_cancelled()
            message = map_api_error(exc)
            _log.warning("%s failed: %s", spec.command.value, message)
            return Failure(message)
        finally:
            port.close()
        token.raise_if_cancelled()
        _log.info("%s succeeded: %s", spec.command.value, body[:200])
        return Success(body)


__all__ = ["CommandDispatcher"]
