from __future__ import annotations

from servman.adapters.storage_local import MemoryUserNameStore
from servman.app.controller import AppController
from servman.domain.commands import Command
from servman.viewmodels.settings_vm import SettingsVM


def test_ensure_ready_requires_api_key() -> None:
    controller = AppController(SettingsVM())

    assert controller.ensure_ready() is False
    assert controller.dispatcher is None
    controller.shutdown()


def test_ensure_ready_builds_dispatcher_once_from_settings() -> None:
    vm = SettingsVM(api_key="k")
    vm.connect_timeout_ms = 1234
    vm.read_timeout_ms = 4321
    controller = AppController(vm)

    assert controller.ensure_ready() is True
    dispatcher = controller.dispatcher
    assert controller.ensure_ready() is True
    assert controller.dispatcher is dispatcher

    start = dispatcher.commands[Command.START]
    assert (start.connect_timeout_ms, start.read_timeout_ms) == (1234, 4321)
    assert dispatcher.commands[Command.HEALTH].read_timeout_ms is None
    adapter = dispatcher.port_factory()
    assert adapter.base_url == vm.base_url
    assert adapter.session.cfg.read_timeout_ms == vm.default_read_timeout_ms
    adapter.close()
    controller.shutdown()


def test_reset_rebuilds_dispatcher_but_keeps_user_name() -> None:
    controller = AppController(SettingsVM(api_key="k"), storage=MemoryUserNameStore("Ada"))
    controller.ensure_ready()
    dispatcher = controller.dispatcher
    user_name = controller.user_name

    controller.reset()
    controller.ensure_ready()

    assert controller.dispatcher is not dispatcher
    assert controller.user_name is user_name
    controller.shutdown()


def test_shutdown_releases_executor() -> None:
    controller = AppController(SettingsVM(api_key="k"))
    first = controller.executor

    controller.shutdown(wait=True)

    assert controller.dispatcher is None
    assert controller.executor is not first
    controller.shutdown()
