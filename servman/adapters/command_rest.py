"""REST adapter for the server-manager ``/health``, ``/start``, ``/stop`` API."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from servman.domain.commands import CommandSpec, build_request_body
from servman.domain.ports import CommandPort

from .http_client import CommandSession, HttpConfig


class CommandRestAdapter(CommandPort):
    """POST one command body to ``<base_url><path>`` and return the body text.

    Any HTTP status is returned as text; interpreting it is left to callers.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str,
        http_config: Optional[HttpConfig] = None,
        session: Optional[CommandSession] = None,
    ) -> None:
        if not base_url or not str(base_url).strip():
            raise ValueError("CommandRestAdapter requires a base URL")
        self.base_url = str(base_url).strip().rstrip("/")
        self.api_key = api_key or ""
        self.session = session or CommandSession(http_config)
        self._log = logging.getLogger(__name__)

    def post_command(self, spec: CommandSpec) -> str:
        url = self._make_url(spec.path)
        context = f"{spec.command.value}[{url}]"
        self._log.debug(
            "POST %s (connect=%s ms, read=%s ms)",
            url,
            spec.connect_timeout_ms or "default",
            spec.read_timeout_ms or "default",
        )
        resp = self.session.post(
            url,
            json_body=build_request_body(self.api_key),
            connect_timeout_ms=spec.connect_timeout_ms,
            read_timeout_ms=spec.read_timeout_ms,
        )
        text = self.session.read_text(resp, context=context)
        self._log.debug("%s -> HTTP %s (%d chars)", context, resp.status_code, len(text))
        return text

    def close(self) -> None:
        """Close this adapter's session; an exchange already sent is discarded upstream."""
        self.session.close()

    def _make_url(self, path: str) -> str:
        return f"{self.base_url}{path}"


def command_adapter_factory(
    base_url: str,
    *,
    api_key: str,
    http_config: Optional[HttpConfig] = None,
) -> Callable[[], CommandRestAdapter]:
    """Return a factory building one adapter (and session) per issued command."""

    def _build() -> CommandRestAdapter:
        return CommandRestAdapter(base_url, api_key=api_key, http_config=http_config)

    return _build


__all__ = ["CommandRestAdapter", "command_adapter_factory"]
