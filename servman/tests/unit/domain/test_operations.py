from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List

import pytest

from servman.domain.operations import AsyncOperation, BehaviorValue, Cancelled


def test_operation_is_cold_until_started(executor) -> None:
    calls: List[int] = []
    op = AsyncOperation(lambda token: calls.append(1) or "done", executor=executor)

    assert not op.started
    assert calls == []
    assert op.result(timeout=5) == "done"
    assert op.started
    assert calls == [1]


def test_subscribe_emits_value_then_completes(executor) -> None:
    events: List[object] = []
    finished = threading.Event()
    op = AsyncOperation(lambda token: 42, executor=executor)

    op.subscribe(events.append, events.append, lambda: (events.append("complete"), finished.set()))

    assert finished.wait(5)
    assert events == [42, "complete"]


def test_subscribe_routes_errors(executor) -> None:
    errors: List[BaseException] = []
    finished = threading.Event()

    def _boom(token):
        raise RuntimeError("boom")

    op = AsyncOperation(_boom, executor=executor)
    op.subscribe(lambda value: None, lambda exc: (errors.append(exc), finished.set()))

    assert finished.wait(5)
    assert isinstance(errors[0], RuntimeError)


def test_cancel_before_start_never_runs(executor) -> None:
    calls: List[int] = []
    op = AsyncOperation(lambda token: calls.append(1), executor=executor)

    op.cancel()
    op.start()

    assert not op.started
    with pytest.raises(Cancelled):
        op.result(timeout=1)
    assert calls == []


def test_cancel_while_running_discards_result_and_runs_abort_hook(executor) -> None:
    entered = threading.Event()
    release = threading.Event()
    aborted = threading.Event()
    delivered: List[object] = []

    def _work(token):
        token.on_cancel(aborted.set)
        entered.set()
        release.wait(5)
        return "late"

    op = AsyncOperation(_work, executor=executor)
    op.subscribe(delivered.append, delivered.append, lambda: delivered.append("complete"))
    assert entered.wait(5)

    op.cancel()
    release.set()

    assert aborted.is_set()
    with pytest.raises(Cancelled):
        op.result(timeout=5)
    assert delivered == []


def test_subscribe_after_completion_replays_terminal_value(executor) -> None:
    op = AsyncOperation(lambda token: "v", executor=executor)
    assert op.result(timeout=5) == "v"

    events: List[object] = []
    finished = threading.Event()
    op.subscribe(events.append, events.append, lambda: (events.append("complete"), finished.set()))

    assert finished.wait(5)
    assert events == ["v", "complete"]


def test_work_raising_cancelled_emits_nothing(executor) -> None:
    events: List[object] = []

    def _work(token):
        raise Cancelled()

    op = AsyncOperation(_work, executor=executor)
    op.subscribe(events.append, events.append, lambda: events.append("complete"))
    with pytest.raises(Cancelled):
        op.result(timeout=5)

    assert events == []


def test_behavior_value_emits_current_then_changes(executor) -> None:
    value: BehaviorValue[str] = BehaviorValue(executor=executor, initial="alice")
    seen: List[str] = []

    handle = value.observe().subscribe(seen.append, lambda exc: None)
    value.set("bob")
    value.set("bob")
    handle.cancel()
    value.set("carol")

    assert seen == ["alice", "bob"]
    assert value.listener_count() == 0


def test_behavior_value_loads_lazily_on_executor(executor) -> None:
    loaded = threading.Event()
    seen: List[str] = []

    def _loader():
        loaded.set()
        return "stored"

    value: BehaviorValue[str] = BehaviorValue(executor=executor, loader=_loader)
    assert not loaded.is_set()

    got = threading.Event()
    value.observe().subscribe(lambda v: (seen.append(v), got.set()), lambda exc: None)

    assert got.wait(5)
    assert seen == ["stored"]


def test_behavior_value_without_stored_value_emits_nothing(executor) -> None:
    load_called = threading.Event()

    def _loader():
        load_called.set()
        return None

    value: BehaviorValue[str] = BehaviorValue(executor=executor, loader=_loader)
    seen: List[str] = []

    value.observe().subscribe(seen.append, lambda exc: None)
    assert load_called.wait(5)

    # set() waits for the in-flight load to release the value lock.
    value.set("first")
    assert seen == ["first"]


def test_behavior_value_loader_error_goes_to_on_error(executor) -> None:
    errors: List[BaseException] = []
    got = threading.Event()

    def _loader():
        raise OSError("disk gone")

    value: BehaviorValue[str] = BehaviorValue(executor=executor, loader=_loader)
    value.observe().subscribe(lambda v: None, lambda exc: (errors.append(exc), got.set()))

    assert got.wait(5)
    assert isinstance(errors[0], OSError)
    assert value.listener_count() == 0


def test_set_before_queued_load_emits_once() -> None:
    pool = ThreadPoolExecutor(max_workers=1)
    gate = threading.Event()
    pool.submit(gate.wait, 5)
    load_calls: List[str] = []

    def _loader():
        load_calls.append("load")
        return "stored"

    value: BehaviorValue[str] = BehaviorValue(executor=pool, loader=_loader)
    seen: List[str] = []
    value.observe().subscribe(seen.append, lambda exc: None)

    # The load is still queued behind the gate when the new value arrives.
    value.set("Ada")
    gate.set()
    pool.shutdown(wait=True)

    assert seen == ["Ada"]
    assert load_calls == []
    assert value.value == "Ada"
