"""Shared HTTP transport utilities for the server-manager adapter.

This module provides a thin wrapper around ``requests.Session`` so the
command adapter can share timeout policy and typed failure mapping.

Dependencies:
    - ``requests`` for network I/O.
    - ``servman.adapters.api_errors`` for typed transport failures.

Call context:
    - Constructed by ``servman/adapters/command_rest.py``, one session per
      issued command so a single exchange can be aborted on its own.
    - Used only inside adapter layer methods; use cases interact through ports.
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import requests
from requests import exceptions as req_exc

from servman.adapters.api_errors import (
    ApiNetworkError,
    ApiTransportError,
    describe_exception,
)


@dataclass
class HttpConfig:
    """Transport default timeouts used when a command has no override.

    Attributes:
        connect_timeout_ms: Bound on establishing the connection.
        read_timeout_ms: Bound on waiting for response bytes once sent.
    """
    connect_timeout_ms: int = 15000
    read_timeout_ms: int = 15000


def _seconds(ms: int) -> float:
    return max(1, int(ms)) / 1000.0


class CommandSession:
    """``requests`` wrapper with per-call timeouts and no retries.

    Callers provide endpoint URLs and decide what a response means; this class
    only turns ``requests`` exceptions into ``ApiNetworkError`` or
    ``ApiTransportError``.
    """

    def __init__(self, cfg: Optional[HttpConfig] = None) -> None:
        """Create a session.

        Args:
            cfg: Transport default timeouts.

        Side Effects:
            Creates a persistent ``requests.Session`` object.
        """
        self.session = requests.Session()
        self.cfg = cfg or HttpConfig()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _headers(self, json_body: bool = False) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _timeouts(
        self, connect_timeout_ms: Optional[int], read_timeout_ms: Optional[int]
    ) -> Tuple[int, int]:
        connect = connect_timeout_ms or self.cfg.connect_timeout_ms
        read = read_timeout_ms or self.cfg.read_timeout_ms
        return int(connect), int(read)

    def post(
        self,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        connect_timeout_ms: Optional[int] = None,
        read_timeout_ms: Optional[int] = None,
    ) -> requests.Response:
        """Send a JSON POST request once.

        Args:
            url: Absolute endpoint URL.
            json_body: Optional payload object serialized to JSON text.
            connect_timeout_ms: Connect timeout override in milliseconds.
            read_timeout_ms: Read timeout override in milliseconds.

        Returns:
            ``requests.Response`` for any HTTP status.

        Raises:
            ApiNetworkError: On connect/read timeouts and connectivity failures.
            ApiTransportError: When the response body cannot be decoded.
        """
        context = f"POST {url}"
        data = None if json_body is None else json.dumps(json_body)
        connect_ms, read_ms = self._timeouts(connect_timeout_ms, read_timeout_ms)
        try:
            return self.session.post(
                url,
                data=data,
                headers=self._headers(json_body=json_body is not None),
                timeout=(_seconds(connect_ms), _seconds(read_ms)),
            )
        except req_exc.ConnectTimeout as exc:
            raise ApiNetworkError(
                f"Connect timed out contacting {url} after {connect_ms} ms",
                timeout=True,
                phase="connect",
                context=context,
            ) from exc
        except req_exc.ReadTimeout as exc:
            raise ApiNetworkError(
                f"Read timed out contacting {url} after {read_ms} ms",
                timeout=True,
                phase="read",
                context=context,
            ) from exc
        except (req_exc.ChunkedEncodingError, req_exc.ContentDecodingError) as exc:
            raise ApiTransportError(
                f"Malformed response from {url}: {describe_exception(exc)}",
                context=context,
            ) from exc
        except req_exc.ConnectionError as exc:
            # requests re-raises body read timeouts as ConnectionError.
            if "timed out" in str(exc).lower():
                raise ApiNetworkError(
                    f"Read timed out contacting {url} after {read_ms} ms",
                    timeout=True,
                    phase="read",
                    context=context,
                ) from exc
            raise ApiNetworkError(
                f"Connection failed contacting {url}: {describe_exception(exc)}",
                context=context,
            ) from exc
        except req_exc.RequestException as exc:
            raise ApiNetworkError(
                f"Request to {url} failed: {describe_exception(exc)}",
                context=context,
            ) from exc

    @staticmethod
    def read_text(resp: requests.Response, *, context: Optional[str] = None) -> str:
        """Return the decoded body of ``resp``.

        Raises:
            ApiTransportError: If the body cannot be decoded as text.
        """
        try:
            text = resp.text
        except (UnicodeDecodeError, LookupError, req_exc.RequestException) as exc:
            raise ApiTransportError(
                f"Unreadable response body: {describe_exception(exc)}",
                context=context,
            ) from exc
        if text is None:
            raise ApiTransportError("Response carried no body", context=context)
        return text

    def close(self) -> None:
        """Close pooled connections. Safe to call from any thread, repeatedly."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self.session.close()


__all__ = ["CommandSession", "HttpConfig"]
