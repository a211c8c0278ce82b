from __future__ import annotations

import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Callable, Dict, Mapping, Optional

from ..utils.logging import env_forces_debug

DEFAULT_BASE_URL = "https://server-manager.majecty.tech/api/dev2"
ENV_BASE_URL = "SERVMAN_BASE_URL"
ENV_API_KEY = "SERVMAN_API_KEY"


@dataclass(frozen=True)
class SettingsConfig:
    """Connection and timing settings persisted in ``user_settings.json``.

    ``connect_timeout_ms``/``read_timeout_ms`` apply to start and stop; the
    ``default_*`` pair is the transport default used by health.
    """

    base_url: str = DEFAULT_BASE_URL
    connect_timeout_ms: int = 5000
    read_timeout_ms: int = 60000
    default_connect_timeout_ms: int = 15000
    default_read_timeout_ms: int = 15000
    pump_interval_ms: int = 50


def _url(value: Any) -> str:
    text = value.strip().rstrip("/") if isinstance(value, str) else ""
    if not text:
        raise ValueError("base_url must be a non-empty string.")
    if not text.startswith(("http://", "https://")):
        raise ValueError(f"base_url must start with http:// or https://, got {text!r}.")
    return text


def _positive_ms(name: str) -> Callable[[Any], int]:
    def _coerce(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError(f"{name} must be a number of milliseconds.")
        try:
            number = int(value.strip()) if isinstance(value, str) else int(value)
        except ValueError as exc:
            raise ValueError(f"{name} must be a number of milliseconds.") from exc
        if number <= 0:
            raise ValueError(f"{name} must be positive.")
        return number

    return _coerce


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


_CONFIG_COERCERS: Dict[str, Callable[[Any], Any]] = {
    f.name: (_url if f.name == "base_url" else _positive_ms(f.name))
    for f in fields(SettingsConfig)
}
_EXTRA_KEYS = ("api_key", "debug_logging")


class SettingsVM:
    """Settings state with validation; persistence goes through ``on_save``.

    The API key and the debug flag live next to the frozen config rather than
    in it, so ``repr(vm.config)`` can be logged.
    """

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
        api_key: str = "",
        on_save: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.config = config or SettingsConfig()
        self.api_key = api_key
        self.on_save = on_save
        self.debug_logging = env_forces_debug()

    # ---- Config bridges ----
    @property
    def base_url(self) -> str:
        return self.config.base_url

    @base_url.setter
    def base_url(self, value: str) -> None:
        self._update(base_url=value)

    @property
    def connect_timeout_ms(self) -> int:
        return self.config.connect_timeout_ms

    @connect_timeout_ms.setter
    def connect_timeout_ms(self, value: int) -> None:
        self._update(connect_timeout_ms=value)

    @property
    def read_timeout_ms(self) -> int:
        return self.config.read_timeout_ms

    @read_timeout_ms.setter
    def read_timeout_ms(self, value: int) -> None:
        self._update(read_timeout_ms=value)

    @property
    def default_connect_timeout_ms(self) -> int:
        return self.config.default_connect_timeout_ms

    @property
    def default_read_timeout_ms(self) -> int:
        return self.config.default_read_timeout_ms

    @property
    def pump_interval_ms(self) -> int:
        return self.config.pump_interval_ms

    # ---- Commands ----
    def is_valid(self) -> bool:
        return self.base_url.startswith(("http://", "https://")) and bool(self.api_key)

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply a flat settings payload; nothing changes if any value is invalid.

        Raises:
            ValueError: On unknown keys or invalid values.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")
        unknown = sorted(str(k) for k in payload if k not in _CONFIG_COERCERS and k not in _EXTRA_KEYS)
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(unknown)}")

        config = self._coerced_config(
            {k: v for k, v in payload.items() if k in _CONFIG_COERCERS}
        )
        api_key = _text(payload["api_key"]) if "api_key" in payload else self.api_key
        debug = _flag(payload["debug_logging"]) if "debug_logging" in payload else self.debug_logging

        self.config, self.api_key, self.debug_logging = config, api_key, debug

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Apply ``SERVMAN_BASE_URL`` / ``SERVMAN_API_KEY`` when set and non-empty."""
        env = os.environ if environ is None else environ
        base_url = _text(env.get(ENV_BASE_URL))
        if base_url:
            self.base_url = base_url
        api_key = _text(env.get(ENV_API_KEY))
        if api_key:
            self.api_key = api_key

    def to_dict(self) -> dict:
        payload = asdict(self.config)
        payload["api_key"] = self.api_key
        payload["debug_logging"] = bool(self.debug_logging)
        return payload

    def set_debug_logging(self, enabled: Any) -> None:
        self.debug_logging = _flag(enabled)

    def cmd_save(self) -> None:
        if not self.is_valid():
            raise ValueError("Settings invalid: base URL and API key are required.")
        if self.on_save:
            self.on_save(self.to_dict())

    # ---- Internals ----
    def _update(self, **changes: Any) -> None:
        self.config = self._coerced_config(changes)

    def _coerced_config(self, changes: Mapping[str, Any]) -> SettingsConfig:
        coerced = {key: _CONFIG_COERCERS[key](value) for key, value in changes.items()}
        return replace(self.config, **coerced) if coerced else self.config
