from __future__ import annotations

import json
import socket

import pytest

from servman.adapters.api_errors import ApiNetworkError
from servman.adapters.command_rest import CommandRestAdapter, command_adapter_factory
from servman.domain.commands import Command, CommandSpec, build_command_table


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_post_command_sends_api_key_body(stub_server) -> None:
    stub_server.route("/start", body="starting")
    adapter = CommandRestAdapter(stub_server.base_url + "/", api_key="secret-token")

    body = adapter.post_command(build_command_table()[Command.START])

    assert body == "starting"
    request = stub_server.requests[0]
    assert request["path"] == "/start"
    assert json.loads(request["body"]) == {"apiKey": "secret-token"}
    assert request["headers"]["Content-Type"] == "application/json"


def test_post_command_returns_error_status_body_as_text(stub_server) -> None:
    stub_server.route("/health", body="server exploded", status=500)
    adapter = CommandRestAdapter(stub_server.base_url, api_key="k")

    assert adapter.post_command(CommandSpec(Command.HEALTH, "/health")) == "server exploded"


def test_post_command_connection_refused_raises_network_error() -> None:
    adapter = CommandRestAdapter(f"http://127.0.0.1:{_free_port()}", api_key="k")

    with pytest.raises(ApiNetworkError) as info:
        adapter.post_command(CommandSpec(Command.STOP, "/stop", connect_timeout_ms=500))

    assert info.value.timeout is False


def test_adapter_requires_base_url() -> None:
    with pytest.raises(ValueError):
        CommandRestAdapter("  ", api_key="k")


def test_factory_builds_independent_sessions() -> None:
    factory = command_adapter_factory("http://srv", api_key="k")

    first, second = factory(), factory()
    first.close()

    assert first.session is not second.session
    assert first.session.closed
    assert not second.session.closed
