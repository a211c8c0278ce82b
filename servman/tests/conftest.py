from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Dict, List, Optional

import pytest

from servman.app.consumer_context import ConsumerQueue


@dataclass
class StubRoute:
    body: str = "ok"
    status: int = 200
    delay_s: float = 0.0
    hang: bool = False


class _StubHandler(BaseHTTPRequestHandler):
    server: "StubServer"

    def do_POST(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        raw = self.rfile.read(length) if length else b""
        self.server.record(self.path, raw, dict(self.headers))
        route = self.server.routes.get(self.path, StubRoute(body="not found", status=404))
        if route.hang:
            self.server.release.wait()
        elif route.delay_s:
            self.server.release.wait(route.delay_s)
        payload = route.body.encode("utf-8")
        try:
            self.send_response(route.status)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format: str, *args: Any) -> None:
        pass


class StubServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self) -> None:
        super().__init__(("127.0.0.1", 0), _StubHandler)
        self.routes: Dict[str, StubRoute] = {}
        self.requests: List[Dict[str, Any]] = []
        self.release = threading.Event()
        self._requests_lock = threading.Lock()

    @property
    def base_url(self) -> str:
        host, port = self.server_address[:2]
        return f"http://{host}:{port}"

    def route(self, path: str, **kwargs: Any) -> StubRoute:
        route = StubRoute(**kwargs)
        self.routes[path] = route
        return route

    def record(self, path: str, body: bytes, headers: Dict[str, str]) -> None:
        with self._requests_lock:
            self.requests.append({"path": path, "body": body, "headers": headers})

    def request_count(self, path: Optional[str] = None) -> int:
        with self._requests_lock:
            return sum(1 for r in self.requests if path is None or r["path"] == path)


@pytest.fixture
def stub_server():
    server = StubServer()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.release.set()
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix="servman-test")
    yield pool
    pool.shutdown(wait=True, cancel_futures=True)


@pytest.fixture
def consumer() -> ConsumerQueue:
    return ConsumerQueue()


def _drain_until(
    consumer: ConsumerQueue, predicate: Callable[[], bool], timeout: float = 5.0
) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        consumer.drain()
        if predicate():
            return True
        consumer.wait_and_drain(timeout=0.02)
        if predicate():
            return True
    return predicate()


@pytest.fixture
def drain_until():
    return _drain_until
