"""Global pytest fixtures.

Upstream HTTP is replaced by ``httpx.MockTransport`` around a FakeUpstream
that serves canned JSON per URL and records every request.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from mindsnack.api.app import create_app
from mindsnack.cache import CacheKeys, LoggingPageRevalidator, ResponseCache
from mindsnack.config import Settings

BASE_URL = "https://api.test/api"
SECRET = "test-secret"
AUTH = {"Authorization": f"Bearer {SECRET}"}


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """Canned upstream API keyed by full request URL."""

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, payload: Any = None, status_code: int = 200) -> None:
        self.routes[url] = (status_code, payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, payload = self.routes.get(str(request.url), (404, {"message": "Not found"}))
        return httpx.Response(status_code, json=payload)

    def calls_to(self, url: str) -> int:
        return sum(1 for r in self.requests if str(r.url) == url)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ResponseCache:
    """Fresh cache per test with a controllable clock."""
    return ResponseCache(ttl=86400, sweep_threshold=100, clock=clock)


@pytest.fixture
def keys() -> CacheKeys:
    return CacheKeys(BASE_URL)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def pages() -> LoggingPageRevalidator:
    return LoggingPageRevalidator()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        articles_api_url=BASE_URL,
        revalidate_secret=SECRET,
        cloudinary_api_secret="cloud-secret",
        cloudinary_api_key="cloud-key",
    )


@pytest.fixture
def client(
    settings: Settings, upstream: FakeUpstream, pages: LoggingPageRevalidator
) -> Iterator[TestClient]:
    """TestClient for a fully wired app talking to the FakeUpstream."""
    http = upstream.client()
    app = create_app(settings, http_client=http, page_revalidator=pages, setup_logging=False)
    with TestClient(app) as test_client:
        yield test_client
    asyncio.run(http.aclose())
