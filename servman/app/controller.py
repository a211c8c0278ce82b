"""Adapter and use-case wiring for the app runtime.

This module owns lazy construction of the command dispatcher and the
user-name value from values in :class:`servman.viewmodels.settings_vm.SettingsVM`.
It is invoked by presenters and the CLI before network actions.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ..adapters.command_rest import command_adapter_factory
from ..adapters.http_client import HttpConfig
from ..adapters.storage_local import MemoryUserNameStore
from ..domain.commands import build_command_table
from ..domain.ports import UserNameStoragePort
from ..usecases.dispatch_command import CommandDispatcher
from ..usecases.user_name import UserNameValue
from ..viewmodels.settings_vm import SettingsVM


class AppController:
    """Create and cache the dispatcher and user-name value from settings state.

    Call chain:
        ``servman.app.main`` and ``UserScreenPresenter`` create or receive one
        instance and call ``ensure_ready`` before issuing commands.
    """

    def __init__(
        self,
        settings_vm: SettingsVM,
        *,
        storage: Optional[UserNameStoragePort] = None,
        max_workers: int = 4,
    ) -> None:
        """Initialize controller with settings-backed lazy dependencies.

        Args:
            settings_vm: Settings state containing base URL, API key and
                timeout policy used to build the dispatcher.
            storage: User-name persistence; in-memory when omitted.
            max_workers: Background thread-pool size.
        """
        self.settings_vm = settings_vm
        self.storage: UserNameStoragePort = storage or MemoryUserNameStore()
        self._max_workers = max(1, int(max_workers))
        self._executor: Optional[ThreadPoolExecutor] = None
        self._dispatcher: Optional[CommandDispatcher] = None
        self._user_name: Optional[UserNameValue] = None
        self._log = logging.getLogger(__name__)

    @property
    def executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="servman"
            )
        return self._executor

    @property
    def dispatcher(self) -> Optional[CommandDispatcher]:
        """Return the cached dispatcher, built by ``ensure_ready``."""
        return self._dispatcher

    @property
    def user_name(self) -> UserNameValue:
        if self._user_name is None:
            self._user_name = UserNameValue(self.storage, self.executor)
        return self._user_name

    def reset(self) -> None:
        """Drop the cached dispatcher so the next ``ensure_ready`` rebuilds it.

        The user-name value is kept; it does not depend on connection settings.
        """
        self._dispatcher = None

    def ensure_ready(self) -> bool:
        """Ensure the dispatcher is available for network operations.

        Returns:
            ``True`` when the dispatcher exists, ``False`` when base URL or API
            key are missing from settings.
        """
        if self._dispatcher is not None:
            return True

        base_url = (self.settings_vm.base_url or "").strip()
        if not base_url or not self.settings_vm.api_key:
            self._log.warning("Server manager base URL or API key not configured")
            return False

        http_config = HttpConfig(
            connect_timeout_ms=self.settings_vm.default_connect_timeout_ms,
            read_timeout_ms=self.settings_vm.default_read_timeout_ms,
        )
        self._dispatcher = CommandDispatcher(
            port_factory=command_adapter_factory(
                base_url,
                api_key=self.settings_vm.api_key,
                http_config=http_config,
            ),
            executor=self.executor,
            commands=build_command_table(
                connect_timeout_ms=self.settings_vm.connect_timeout_ms,
                read_timeout_ms=self.settings_vm.read_timeout_ms,
            ),
        )
        return True

    def shutdown(self, *, wait: bool = False) -> None:
        """Release the thread pool; queued work that has not started is dropped."""
        executor, self._executor = self._executor, None
        self._dispatcher = None
        self._user_name = None
        if executor is not None:
            executor.shutdown(wait=wait, cancel_futures=True)
