"""Consumer execution context for marshaling deliveries onto one thread.

Background workers ``post`` delivery thunks into a :class:`ConsumerQueue`;
the consumer thread (for example the Tk main loop) runs them with ``drain``.
:class:`ConsumerPump` keeps draining on a UI scheduler by passing Tk ``after``
and ``after_cancel`` callables, so timer state is tracked in one place and
canceled safely when the screen closes.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Protocol


Thunk = Callable[[], None]
ScheduleFn = Callable[[int, Callable[[], None]], str]
CancelFn = Callable[[str], None]


class ConsumerExecutor(Protocol):
    """Accepts thunks from any thread and runs them on the consumer context."""

    def post(self, fn: Thunk) -> None: ...


class ConsumerQueue(ConsumerExecutor):
    """Thread-safe FIFO of deliveries, executed only by ``drain`` callers."""

    def __init__(self) -> None:
        self._queue: "queue.SimpleQueue[Thunk]" = queue.SimpleQueue()
        self._drain_lock = threading.Lock()
        self._log = logging.getLogger(__name__)

    def post(self, fn: Thunk) -> None:
        self._queue.put(fn)

    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self, max_items: Optional[int] = None) -> int:
        """Run queued thunks in order on the calling thread.

        Args:
            max_items: Optional cap on thunks executed in this call.

        Returns:
            Number of thunks executed.

        Exceptions raised by one thunk are logged and do not stop the others.
        Concurrent ``drain`` calls are serialized so deliveries never overlap.
        """
        executed = 0
        with self._drain_lock:
            while max_items is None or executed < max_items:
                try:
                    fn = self._queue.get_nowait()
                except queue.Empty:
                    break
                executed += 1
                try:
                    fn()
                except Exception:
                    self._log.exception("Delivery callback failed")
        return executed

    def wait_and_drain(self, timeout: Optional[float] = None) -> int:
        """Block for the first thunk (up to ``timeout`` seconds), then drain."""
        try:
            fn = self._queue.get(timeout=timeout)
        except queue.Empty:
            return 0
        with self._drain_lock:
            try:
                fn()
            except Exception:
                self._log.exception("Delivery callback failed")
        return 1 + self.drain()


@dataclass
class PumpHandle:
    """Timer token of the pending drain tick."""

    token: str


class ConsumerPump:
    """Drain a :class:`ConsumerQueue` periodically using a UI scheduler."""

    def __init__(
        self,
        consumer: ConsumerQueue,
        schedule: ScheduleFn,
        cancel: CancelFn,
        *,
        interval_ms: int = 50,
    ) -> None:
        """Store schedule/cancel functions.

        Args:
            consumer: Queue drained on every tick.
            schedule: Function compatible with ``after(delay_ms, callback)``.
            cancel: Function compatible with ``after_cancel(token)``.
            interval_ms: Delay between drain ticks.
        """
        self._consumer = consumer
        self._schedule = schedule
        self._cancel = cancel
        self._interval_ms = max(1, int(interval_ms))
        self._handle: Optional[PumpHandle] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._schedule_next()

    def stop(self) -> None:
        """Cancel the pending tick; queued thunks stay queued."""
        self._running = False
        handle, self._handle = self._handle, None
        if not handle:
            return
        try:
            self._cancel(handle.token)
        except Exception:
            pass

    def _schedule_next(self) -> None:
        token = self._schedule(self._interval_ms, self._on_tick)
        self._handle = PumpHandle(token=token)

    def _on_tick(self) -> None:
        self._handle = None
        if not self._running:
            return
        self._consumer.drain()
        if self._running:
            self._schedule_next()


__all__ = ["ConsumerExecutor", "ConsumerPump", "ConsumerQueue", "PumpHandle"]
