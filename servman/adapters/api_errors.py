from __future__ import annotations

from typing import Optional


class ApiError(RuntimeError):
    """Base class for server-manager adapter failures."""

    def __init__(
        self,
        message: str,
        *,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.context = context


class ApiNetworkError(ApiError):
    """Connect/read failure, including timeouts and DNS errors."""

    def __init__(
        self,
        message: str,
        *,
        timeout: bool = False,
        phase: Optional[str] = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message, context=context)
        self.timeout = timeout
        self.phase = phase


class ApiTransportError(ApiError):
    """Response arrived but its body could not be read or decoded."""

    def __init__(
        self,
        message: str,
        *,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message, context=context)


def describe_exception(exc: BaseException, *, limit: int = 200) -> str:
    """Render an exception as ``Type: message``, the message cut to ``limit`` chars.

    Multi-line messages (urllib3 nests the cause in its text) collapse to one
    line so they fit a status label.
    """
    name = type(exc).__name__
    detail = " ".join(str(exc).split())
    if not detail:
        return name
    if len(detail) > limit:
        detail = detail[: max(0, limit - 3)].rstrip() + "..."
    return f"{name}: {detail}"


__all__ = [
    "ApiError",
    "ApiNetworkError",
    "ApiTransportError",
    "describe_exception",
]
