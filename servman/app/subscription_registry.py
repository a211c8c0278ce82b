"""Bind asynchronous deliveries to the lifetime of one consumer.

A presenter owns one :class:`SubscriptionRegistry` per screen instance. Every
operation or stream it observes goes through :meth:`SubscriptionRegistry.add`,
and the screen's teardown path calls :meth:`SubscriptionRegistry.cancel_all`.
After ``cancel_all`` returns, no callback of a subscription that was live at
call time runs again.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, Dict, Generic, Optional, TypeVar

from servman.domain.operations import Cancellable, Source

from .consumer_context import ConsumerExecutor

T = TypeVar("T")

_ids = itertools.count(1)


class Subscription(Generic[T]):
    """Handle for one source bound to a consumer through a registry.

    Deliveries are posted to the consumer context and re-checked there; an
    inactive subscription turns every pending delivery into a no-op.
    """

    def __init__(
        self,
        registry: "SubscriptionRegistry",
        on_result: Callable[[T], None],
        on_error: Optional[Callable[[BaseException], None]],
        name: str,
    ) -> None:
        self.id = next(_ids)
        self.name = name
        self._registry = registry
        self._on_result = on_result
        self._on_error = on_error
        self._handle: Optional[Cancellable] = None
        self._active = True

    def __repr__(self) -> str:
        state = "active" if self._active else "inactive"
        return f"<Subscription {self.id} {self.name!r} {state}>"

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Remove this subscription from its registry and cancel its source."""
        self._registry._remove(self)
        self._cancel_handle()

    # Source callbacks; may run on any thread.
    def _next(self, value: T) -> None:
        self._registry._post(lambda: self._deliver(lambda: self._on_result(value), terminal=False))

    def _error(self, exc: BaseException) -> None:
        self._registry._post(lambda: self._deliver(lambda: self._report_error(exc), terminal=True))

    def _complete(self) -> None:
        self._registry._post(lambda: self._deliver(None, terminal=True))

    def _deliver(self, fn: Optional[Callable[[], None]], *, terminal: bool) -> None:
        with self._registry._lock:
            if not self._active:
                return
            if terminal:
                self._registry._drop(self)
            if fn is not None:
                fn()

    def _report_error(self, exc: BaseException) -> None:
        if self._on_error is not None:
            self._on_error(exc)
            return
        self._registry._log.error("Unhandled error in %s", self.name, exc_info=exc)

    def _attach(self, handle: Cancellable) -> None:
        with self._registry._lock:
            if self._active:
                self._handle = handle
                return
        handle.cancel()

    def _cancel_handle(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            handle.cancel()
        except Exception:
            self._registry._log.warning("Cancelling %s failed", self.name, exc_info=True)


class SubscriptionRegistry:
    """Set of live subscriptions for one consumer with bulk cancellation.

    ``add`` and ``cancel_all`` are mutually exclusive. Consumer-side deliveries
    run under the same re-entrant lock, so a callback may itself call ``add``
    or ``cancel_all``.
    """

    def __init__(self, consumer: ConsumerExecutor, *, name: str = "registry") -> None:
        self.name = name
        self._consumer = consumer
        self._lock = threading.RLock()
        self._subs: Dict[int, Subscription] = {}
        self._log = logging.getLogger(__name__)

    def __len__(self) -> int:
        with self._lock:
            return len(self._subs)

    def __contains__(self, sub: object) -> bool:
        with self._lock:
            return isinstance(sub, Subscription) and self._subs.get(sub.id) is sub

    def add(
        self,
        source: Source[T],
        on_result: Callable[[T], None],
        on_error: Optional[Callable[[BaseException], None]] = None,
        *,
        name: Optional[str] = None,
    ) -> Subscription[T]:
        """Register a subscription, then subscribe to (and start) ``source``.

        Args:
            source: Single-shot operation or stream.
            on_result: Called on the consumer context with each value.
            on_error: Called on the consumer context with a terminal error.
                Errors are logged when omitted.
            name: Label used in logs.

        Returns:
            The :class:`Subscription`; already inactive when ``source`` was
            cancelled before it was added.

        Raises:
            Exception: Whatever ``source.subscribe`` raises; nothing stays
                registered in that case.
        """
        label = name or getattr(source, "name", None) or type(source).__name__
        with self._lock:
            sub: Subscription[T] = Subscription(self, on_result, on_error, label)
            self._subs[sub.id] = sub
        try:
            handle = source.subscribe(sub._next, sub._error, sub._complete)
        except Exception:
            self._remove(sub)
            raise
        sub._attach(handle)
        if getattr(source, "cancelled", False):
            # A cancelled operation never delivers a terminal callback.
            sub.cancel()
            self._log.debug("%s: %s already cancelled, not registered", self.name, label)
            return sub
        self._log.debug("%s: subscribed %s", self.name, label)
        return sub

    def cancel_all(self) -> int:
        """Empty the set and cancel every source in it. Idempotent.

        Returns:
            Number of subscriptions that were cancelled.
        """
        with self._lock:
            subs = list(self._subs.values())
            self._subs.clear()
            for sub in subs:
                sub._active = False
        for sub in subs:
            sub._cancel_handle()
        if subs:
            self._log.debug("%s: cancelled %d subscription(s)", self.name, len(subs))
        return len(subs)

    def _post(self, fn: Callable[[], None]) -> None:
        self._consumer.post(fn)

    def _drop(self, sub: Subscription) -> None:
        with self._lock:
            sub._active = False
            sub._handle = None
            self._subs.pop(sub.id, None)

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            sub._active = False
            self._subs.pop(sub.id, None)


__all__ = ["Subscription", "SubscriptionRegistry"]
