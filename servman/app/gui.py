# servman/app/gui.py
from __future__ import annotations

import logging
import os
import tkinter as tk
from typing import Optional

from ..adapters.storage_local import StorageLocal
from ..utils import logging as logging_utils
from ..viewmodels.server_vm import ServerStatusVM
from ..viewmodels.settings_vm import SettingsVM
from ..viewmodels.user_vm import UserVM
from .consumer_context import ConsumerPump, ConsumerQueue
from .controller import AppController
from .user_screen import UserScreenPresenter
from .views.user_screen_view import UserScreenView

logging_utils.configure_root()


class App:
    """Bootstrap: wire the Tk view, viewmodels, presenter and consumer pump."""

    def __init__(self, *, root_dir: Optional[str] = None) -> None:
        self._log = logging.getLogger(__name__)
        self.win = tk.Tk()
        self.win.title("Server manager")
        self.win.minsize(460, 240)

        # ---- Settings & storage ----
        self.storage = StorageLocal(root_dir=root_dir or os.getcwd())
        self.settings_vm = SettingsVM(on_save=self.storage.save_user_settings)
        self._load_settings()
        logging_utils.apply_debug_preference(self.settings_vm.debug_logging)

        # ---- ViewModels ----
        self.server_vm = ServerStatusVM()
        self.user_vm = UserVM()

        # ---- View ----
        self.view = UserScreenView(
            self.win,
            on_refresh=self.server_vm.cmd_refresh,
            on_start=self.server_vm.cmd_start,
            on_stop=self.server_vm.cmd_stop,
            on_name_input=self.user_vm.set_name_input,
            on_update_user=self.user_vm.cmd_update_user,
        )
        self.view.pack(fill="both", expand=True)
        self.server_vm.on_change = self.view.set_status
        self.user_vm.on_change = self._apply_user_vm

        # ---- Presenter on the Tk thread ----
        self.controller = AppController(self.settings_vm, storage=self.storage)
        self.consumer = ConsumerQueue()
        self.pump = ConsumerPump(
            self.consumer,
            self.win.after,
            self.win.after_cancel,
            interval_ms=self.settings_vm.pump_interval_ms,
        )
        self.presenter = UserScreenPresenter(
            self.controller,
            self.consumer,
            server_vm=self.server_vm,
            user_vm=self.user_vm,
        )
        self._started = False

        self.win.bind("<Map>", self._on_map)
        self.win.bind("<Unmap>", self._on_unmap)
        self.win.protocol("WM_DELETE_WINDOW", self._on_close)

        self.pump.start()
        self.presenter.on_create()
        self._start_presenter()

    # ------------------------------------------------------------------
    def _load_settings(self) -> None:
        try:
            payload = self.storage.load_user_settings()
            if payload:
                self.settings_vm.apply_dict(payload)
        except ValueError as exc:
            self._log.warning("Ignoring stored settings: %s", exc)
        self.settings_vm.apply_env()

    def _apply_user_vm(self, vm: UserVM) -> None:
        self.view.set_user_name(vm.user_name)
        self.view.set_update_enabled(vm.update_enabled)

    # ---- Lifecycle ----
    def _start_presenter(self) -> None:
        if self._started:
            return
        self._started = True
        self.presenter.on_start()

    def _stop_presenter(self) -> None:
        if not self._started:
            return
        self._started = False
        self.presenter.on_stop()

    def _on_map(self, event: tk.Event) -> None:
        if event.widget is self.win:
            self._start_presenter()

    def _on_unmap(self, event: tk.Event) -> None:
        if event.widget is self.win:
            self._stop_presenter()

    def _on_close(self) -> None:
        self._stop_presenter()
        self.pump.stop()
        self.controller.shutdown()
        self.win.destroy()


def main() -> None:
    app = App()
    app.win.mainloop()


if __name__ == "__main__":
    main()
