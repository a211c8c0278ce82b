from __future__ import annotations

from typing import Callable, Optional

from servman.domain.outcome import Failure, Outcome, Success


class ServerStatusVM:
    """Server status line plus refresh/start/stop intents. No I/O here."""

    def __init__(
        self,
        *,
        on_refresh: Optional[Callable[[], None]] = None,
        on_start: Optional[Callable[[], None]] = None,
        on_stop: Optional[Callable[[], None]] = None,
        on_change: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.on_refresh = on_refresh
        self.on_start = on_start
        self.on_stop = on_stop
        self.on_change = on_change
        self.status_text: str = ""
        self.last_outcome: Optional[Outcome] = None

    @property
    def last_failed(self) -> bool:
        return isinstance(self.last_outcome, Failure)

    def apply_outcome(self, outcome: Outcome) -> None:
        if not isinstance(outcome, (Success, Failure)):
            raise TypeError(f"Not an Outcome: {outcome!r}")
        self.last_outcome = outcome
        self.set_status(outcome.text)

    def set_status(self, text: str) -> None:
        self.status_text = text
        if self.on_change:
            self.on_change(text)

    def cmd_refresh(self) -> None:
        if self.on_refresh:
            self.on_refresh()

    def cmd_start(self) -> None:
        if self.on_start:
            self.on_start()

    def cmd_stop(self) -> None:
        if self.on_stop:
            self.on_stop()
