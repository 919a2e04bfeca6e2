"""Root conftest — fake Docmost server, controllable clock, gateway factory.

Invariants:
    - No test touches the network: every client runs on httpx.MockTransport
    - No test waits on real time: clocks and backoff sleeps are injected

Design Decisions:
    - FakeDocmost answers per path from a queue (last reply repeats) or a callable
      keyed on the JSON body, and records every request it sees
    - The handler is async and yields once, so concurrent callers interleave
      at the transport boundary the way they do against a real server
"""

import asyncio
import json
import os

import httpx
import pytest

# Ensure tests never pick up real credentials
os.environ.setdefault("DOCMOST_BASE_URL", "http://docmost.test")
os.environ.setdefault("DOCMOST_EMAIL", "bridge@example.com")
os.environ.setdefault("DOCMOST_PASSWORD", "test-password")

from docmost_bridge.core.domain_types import RetryPolicy  # noqa: E402
from docmost_bridge.core.response_cache import (  # noqa: E402
    ResponseCache, build_tier_configs,
)
from docmost_bridge.infrastructure.resilient_executor import ResilientExecutor  # noqa: E402
from docmost_bridge.infrastructure.session_manager import SessionManager  # noqa: E402
from docmost_bridge.services.api_gateway import DocmostGateway  # noqa: E402

BASE_URL = "http://docmost.test"
LOGIN_PATH = "/api/auth/login"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDocmost:
    """In-memory stand-in for the Docmost HTTP API."""

    def __init__(self):
        self.requests: list[tuple[str, str, dict | None]] = []
        self.routes: dict[str, list | object] = {}
        self.login_status = 200
        self.cookie_name: str | None = "authToken"
        self.logins = 0
        self.unreachable = False
        self.login_errors: list[Exception] = []

    def reply(self, path: str, *items) -> None:
        """Queue replies for a path: (status, payload[, headers]) or an exception."""
        self.routes[path] = list(items)

    def route(self, path: str, fn) -> None:
        """Answer a path with fn(body) -> (status, payload[, headers])."""
        self.routes[path] = fn

    def calls_to(self, path: str) -> list[dict | None]:
        return [body for _, p, body in self.requests if p == path]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0)
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        body = json.loads(request.content) if request.content else None
        path = request.url.path
        self.requests.append((request.method, path, body))

        if path == LOGIN_PATH:
            if self.login_errors:
                raise self.login_errors.pop(0)
            return self._login()

        handler = self.routes.get(path)
        if handler is None:
            return httpx.Response(404, json={"message": f"No route {path}"})
        if callable(handler):
            item = handler(body)
        else:
            item = handler.pop(0) if len(handler) > 1 else handler[0]
        return _build(item)

    def _login(self) -> httpx.Response:
        if self.login_status not in (200, 204):
            return httpx.Response(
                self.login_status, json={"message": "Invalid credentials"},
            )
        self.logins += 1
        headers = {}
        if self.cookie_name:
            headers["set-cookie"] = (
                f"{self.cookie_name}=token-{self.logins}; Path=/; HttpOnly"
            )
        return httpx.Response(self.login_status, headers=headers)


def _build(item) -> httpx.Response:
    if isinstance(item, Exception):
        raise item
    status, payload, *rest = item
    headers = rest[0] if rest else None
    if isinstance(payload, bytes):
        return httpx.Response(status, content=payload, headers=headers)
    if payload is None:
        return httpx.Response(status, headers=headers)
    return httpx.Response(status, json=payload, headers=headers)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def docmost():
    return FakeDocmost()


@pytest.fixture
def sleeps():
    """Backoff delays (seconds) requested by login and the executor, in order."""
    return []


@pytest.fixture
def retry_policy():
    return RetryPolicy(max_attempts=3, min_delay_ms=100, max_delay_ms=30_000, factor=2)


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return _sleep


@pytest.fixture
async def session_manager(docmost, clock, retry_policy, fake_sleep):
    manager = SessionManager(
        BASE_URL, "bridge@example.com", "test-password",
        transport=docmost.transport, clock=clock,
        policy=retry_policy, sleep=fake_sleep,
    )
    yield manager
    await manager.aclose()


@pytest.fixture
def executor(session_manager, retry_policy, fake_sleep):
    return ResilientExecutor(session_manager, retry_policy, sleep=fake_sleep)


@pytest.fixture
def cache(clock):
    return ResponseCache(
        build_tier_configs(spaces_ttl=300, search_ttl=120, max_entries=100),
        max_size=100,
        clock=clock,
    )


@pytest.fixture
def gateway(session_manager, executor, cache):
    return DocmostGateway(session_manager, executor, cache)
