"""Cancellable asynchronous sources consumed by ``SubscriptionRegistry``.

Two shapes are supported behind one ``subscribe(on_next, on_error,
on_complete)`` protocol:

* :class:`AsyncOperation` runs one blocking callable on a thread pool and
  emits exactly one value (or one error) followed by completion.
* :class:`BehaviorValue` holds a mutable value; its :class:`ValueStream`
  emits the current value on subscribe and then every change.

Cancellation is cooperative. A cancelled operation never emits anything, even
when its worker finishes afterwards.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import CancelledError as FutureCancelledError
from concurrent.futures import Executor, Future
from typing import Callable, Generic, List, Optional, Protocol, Tuple, TypeVar

T = TypeVar("T")

OnNext = Callable[[T], None]
OnError = Callable[[BaseException], None]
OnComplete = Callable[[], None]

_log = logging.getLogger(__name__)


class Cancelled(Exception):
    """Signals that an operation was cancelled before it completed.

    Never delivered to an error callback.
    """


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Source(Protocol[T]):
    """Anything the registry can bind to a consumer lifetime."""

    def subscribe(
        self,
        on_next: OnNext[T],
        on_error: OnError,
        on_complete: Optional[OnComplete] = None,
    ) -> Cancellable: ...


class CancelToken:
    """Thread-safe cancellation flag with abort hooks."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False
        self._hooks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> bool:
        """Flip the flag and run abort hooks once. Returns ``False`` if already set."""
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled = True
            hooks, self._hooks = self._hooks, []
        for hook in hooks:
            try:
                hook()
            except Exception:
                _log.debug("Abort hook failed", exc_info=True)
        return True

    def on_cancel(self, hook: Callable[[], None]) -> None:
        """Register ``hook``; runs immediately when the token is already cancelled."""
        with self._lock:
            if not self._cancelled:
                self._hooks.append(hook)
                return
        hook()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise Cancelled()


class AsyncOperation(Generic[T]):
    """One blocking unit of work executed on ``executor``.

    The operation is cold: nothing runs until :meth:`start`, :meth:`subscribe`
    or :meth:`result` is called. ``work`` receives the operation's
    :class:`CancelToken` so it can register abort hooks.
    """

    def __init__(
        self,
        work: Callable[[CancelToken], T],
        *,
        executor: Executor,
        name: str = "operation",
    ) -> None:
        self.name = name
        self.token = CancelToken()
        self._work = work
        self._executor = executor
        self._lock = threading.Lock()
        self._future: Optional[Future] = None
        self._listeners: List[Tuple[OnNext[T], OnError, Optional[OnComplete]]] = []
        self._finished = False

    @property
    def started(self) -> bool:
        return self._future is not None

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    @property
    def done(self) -> bool:
        return self._finished

    def start(self) -> "AsyncOperation[T]":
        """Submit the work to the executor if not already started or cancelled."""
        with self._lock:
            if self._future is not None or self.token.cancelled:
                return self
            self._future = self._executor.submit(self._run)
            future = self._future
        future.add_done_callback(self._on_done)
        return self

    def subscribe(
        self,
        on_next: OnNext[T],
        on_error: OnError,
        on_complete: Optional[OnComplete] = None,
    ) -> Cancellable:
        """Register terminal callbacks, then start the operation.

        Callbacks run on whichever thread finishes the work; callers that need
        a particular thread must marshal themselves.
        """
        listener = (on_next, on_error, on_complete)
        with self._lock:
            replay = self._finished
            if not replay:
                self._listeners.append(listener)
        if replay:
            self._emit_to(listener, self._future)
        else:
            self.start()
        return self

    def cancel(self) -> None:
        """Request cancellation; pending or late results are discarded."""
        if not self.token.cancel():
            return
        with self._lock:
            self._listeners.clear()
            future = self._future
        if future is not None:
            future.cancel()
        _log.debug("Cancelled %s", self.name)

    def result(self, timeout: Optional[float] = None) -> T:
        """Start if needed and block until the value is available.

        Raises:
            Cancelled: If the operation was cancelled.
            concurrent.futures.TimeoutError: If ``timeout`` elapses first.
        """
        self.start()
        future = self._future
        if future is None:
            raise Cancelled()
        try:
            value = future.result(timeout=timeout)
        except FutureCancelledError as exc:
            raise Cancelled() from exc
        if self.token.cancelled:
            raise Cancelled()
        return value

    def _run(self) -> T:
        self.token.raise_if_cancelled()
        return self._work(self.token)

    def _on_done(self, future: Future) -> None:
        with self._lock:
            self._finished = True
            listeners, self._listeners = self._listeners, []
        if self.token.cancelled:
            return
        for listener in listeners:
            self._emit_to(listener, future)

    def _emit_to(
        self,
        listener: Tuple[OnNext[T], OnError, Optional[OnComplete]],
        future: Optional[Future],
    ) -> None:
        if future is None or future.cancelled() or self.token.cancelled:
            return
        on_next, on_error, on_complete = listener
        exc = future.exception()
        if isinstance(exc, Cancelled):
            return
        if exc is not None:
            on_error(exc)
            return
        on_next(future.result())
        if on_complete is not None:
            on_complete()


class _StreamHandle:
    def __init__(self, owner: "BehaviorValue", listener_id: int) -> None:
        self._owner = owner
        self._listener_id = listener_id

    def cancel(self) -> None:
        self._owner._remove_listener(self._listener_id)


class BehaviorValue(Generic[T]):
    """Mutable value with change notification.

    ``loader`` is called lazily on the executor the first time a subscriber
    attaches; ``None`` from the loader means "no value yet" and nothing is
    emitted until the first :meth:`set`.
    """

    def __init__(
        self,
        *,
        executor: Executor,
        loader: Optional[Callable[[], Optional[T]]] = None,
        initial: Optional[T] = None,
        name: str = "value",
    ) -> None:
        self.name = name
        self._executor = executor
        self._loader = loader
        self._lock = threading.RLock()
        self._value: Optional[T] = initial
        self._loaded = loader is None or initial is not None
        self._listeners: dict[int, Tuple[OnNext[T], OnError]] = {}
        # Listeners whose first value is still owed by a queued load.
        self._awaiting_load: set[int] = set()
        self._next_id = 0

    @property
    def value(self) -> Optional[T]:
        return self._value

    def set(self, value: T) -> None:
        """Store ``value`` and notify every listener when it changed."""
        with self._lock:
            self._loaded = True
            if self._value == value:
                return
            self._value = value
            listeners = list(self._listeners.values())
            self._awaiting_load.clear()
            for on_next, _ in listeners:
                on_next(value)

    def observe(self) -> "ValueStream[T]":
        return ValueStream(self)

    def _attach(self, on_next: OnNext[T], on_error: OnError) -> Cancellable:
        with self._lock:
            listener_id = self._next_id
            self._next_id += 1
            self._listeners[listener_id] = (on_next, on_error)
        handle = _StreamHandle(self, listener_id)
        with self._lock:
            if self._loaded:
                self._emit_current(listener_id)
                return handle
            self._awaiting_load.add(listener_id)
        self._executor.submit(self._load_then_emit, listener_id)
        return handle

    def _load_then_emit(self, listener_id: int) -> None:
        with self._lock:
            if listener_id not in self._awaiting_load:
                return
            self._awaiting_load.discard(listener_id)
            if not self._loaded:
                try:
                    loaded = self._loader() if self._loader else None
                except Exception as exc:
                    listener = self._listeners.pop(listener_id, None)
                    if listener is not None:
                        listener[1](exc)
                    return
                self._loaded = True
                if loaded is not None:
                    self._value = loaded
            self._emit_current(listener_id)

    def _emit_current(self, listener_id: int) -> None:
        with self._lock:
            listener = self._listeners.get(listener_id)
            if listener is None or self._value is None:
                return
            listener[0](self._value)

    def _remove_listener(self, listener_id: int) -> None:
        with self._lock:
            self._listeners.pop(listener_id, None)
            self._awaiting_load.discard(listener_id)

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)


class ValueStream(Generic[T]):
    """Subscribable view of a :class:`BehaviorValue`; never completes."""

    def __init__(self, owner: BehaviorValue[T]) -> None:
        self._owner = owner

    def subscribe(
        self,
        on_next: OnNext[T],
        on_error: OnError,
        on_complete: Optional[OnComplete] = None,
    ) -> Cancellable:
        return self._owner._attach(on_next, on_error)


__all__ = [
    "AsyncOperation",
    "BehaviorValue",
    "CancelToken",
    "Cancellable",
    "Cancelled",
    "Source",
    "ValueStream",
]
