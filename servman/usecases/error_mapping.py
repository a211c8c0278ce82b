"""Translate adapter errors into the text carried by a ``Failure`` outcome."""

from __future__ import annotations


from servman.adapters.api_errors import (
    ApiError,
    ApiNetworkError,
    ApiTransportError,
    describe_exception,
)
from servman.domain.ports import UseCaseError


def map_api_error(exc: BaseException) -> str:
    """Render any failure of a command as a human-readable status message.

    Args:
        exc (BaseException): Error raised by the adapter or the work callable.

    Returns:
        str: Message shown to the user as-is.
    """
    if isinstance(exc, UseCaseError):
        return exc.message
    if isinstance(exc, ApiNetworkError):
        if exc.timeout:
            return _compose_error_message("Request timed out", str(exc))
        return _compose_error_message("Network error", str(exc))
    if isinstance(exc, ApiTransportError):
        return _compose_error_message("Invalid response", str(exc))
    if isinstance(exc, ApiError):
        return _compose_error_message("Request failed", str(exc))
    return _compose_error_message("Unexpected error", describe_exception(exc))


def _compose_error_message(base: str, hint: str) -> str:
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_api_error"]
