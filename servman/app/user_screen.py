"""Presenter for the user/server screen.

Owns one :class:`SubscriptionRegistry` per screen instance and mirrors the
screen lifecycle: ``on_create`` wires intents and checks server health,
``on_start`` observes the user name, ``on_stop`` cancels everything so no
result reaches the viewmodels after the screen went away.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..domain.commands import Command
from ..domain.outcome import Outcome, fold_outcome
from ..domain.ports import UseCaseError
from ..viewmodels.server_vm import ServerStatusVM
from ..viewmodels.user_vm import UserVM
from .consumer_context import ConsumerExecutor
from .controller import AppController
from .subscription_registry import Subscription, SubscriptionRegistry

NOT_CONFIGURED_TEXT = "Server manager URL or API key not configured."


class UserScreenPresenter:
    def __init__(
        self,
        controller: AppController,
        consumer: ConsumerExecutor,
        *,
        server_vm: Optional[ServerStatusVM] = None,
        user_vm: Optional[UserVM] = None,
    ) -> None:
        self.controller = controller
        self.server_vm = server_vm or ServerStatusVM()
        self.user_vm = user_vm or UserVM()
        self.registry = SubscriptionRegistry(consumer, name="user_screen")
        self._log = logging.getLogger(__name__)

    # ---- Lifecycle ----
    def on_create(self) -> None:
        self.server_vm.on_refresh = self.update_server_state
        self.server_vm.on_start = self.start_server
        self.server_vm.on_stop = self.stop_server
        self.user_vm.on_update_user = self.update_user_name
        self.update_server_state()

    def on_start(self) -> None:
        self.registry.add(
            self.controller.user_name.observe(),
            self.user_vm.set_user_name,
            on_error=lambda exc: self._log.error("Unable to get username", exc_info=exc),
            name="user_name",
        )

    def on_stop(self) -> None:
        self.registry.cancel_all()

    # ---- Server commands ----
    def update_server_state(self) -> Optional[Subscription[Outcome]]:
        self._log.debug("Update button clicked")
        return self._issue(Command.HEALTH)

    def start_server(self) -> Optional[Subscription[Outcome]]:
        self._log.debug("Start button clicked")
        return self._issue(Command.START)

    def stop_server(self) -> Optional[Subscription[Outcome]]:
        self._log.debug("Stop button clicked")
        return self._issue(Command.STOP)

    def _issue(self, command: Command) -> Optional[Subscription[Outcome]]:
        if not self.controller.ensure_ready() or self.controller.dispatcher is None:
            self.server_vm.set_status(NOT_CONFIGURED_TEXT)
            return None
        return self.registry.add(
            self.controller.dispatcher.issue(command),
            self._on_outcome,
            name=f"command:{command.value}",
        )

    def _on_outcome(self, outcome: Outcome) -> None:
        fold_outcome(
            outcome,
            lambda body: self._log.debug("Success %s", body),
            lambda error: self._log.error("Failed %s", error),
        )
        self.server_vm.apply_outcome(outcome)

    # ---- User name ----
    def update_user_name(self, name: Optional[str] = None) -> Subscription[None]:
        text = self.user_vm.name_input if name is None else name
        # Disabled until the update has been stored.
        self.user_vm.set_update_enabled(False)
        return self.registry.add(
            self.controller.user_name.update(text),
            lambda _: self.user_vm.set_update_enabled(True),
            on_error=self._on_update_failed,
            name="update_user_name",
        )

    def _on_update_failed(self, exc: BaseException) -> None:
        detail = exc.message if isinstance(exc, UseCaseError) else str(exc)
        self._log.error("Unable to update username: %s", detail, exc_info=exc)
