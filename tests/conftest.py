"""Pytest configuration providing shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Iterator, Union

import httpx
import pytest

from fuzzgen.config import ConfigLocator, ConfigRepository, GlobalConfig
from fuzzgen.infra import SQLiteManager
from fuzzgen.logging_conf import configure_logging

# A route is either a ready response or a callable building one from the request.
Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


def text_response(body: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=body.encode("utf-8"), headers={"Content-Type": "text/plain"})


def broken_stream(lines: Iterable[str]) -> Iterator[bytes]:
    """Yield ``lines`` then fail like a dropped connection."""

    for line in lines:
        yield f"{line}\n".encode("utf-8")
    raise httpx.ReadError("connection reset")


def streaming_route(lines: Iterable[str]) -> Callable[[httpx.Request], httpx.Response]:
    """Route that answers HEAD normally and breaks the GET body after ``lines``."""

    def _route(request: httpx.Request) -> httpx.Response:
        if request.method == "HEAD":
            return httpx.Response(200)
        return httpx.Response(200, content=broken_stream(lines))

    return _route


class RecordingTransport(httpx.MockTransport):
    """Mock transport answering from a URL map and recording every request."""

    def __init__(self, routes: dict[str, Route]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404)
        if callable(route):
            return route(request)
        if request.method == "HEAD":
            return httpx.Response(route.status_code)
        return httpx.Response(
            route.status_code,
            content=route.content,
            headers=route.headers,
        )

    def methods_for(self, url: str) -> list[str]:
        return [request.method for request in self.requests if str(request.url) == url]


@pytest.fixture(autouse=True)
def fuzzgen_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("FUZZGEN_HOME", str(tmp_path))
    # Bind handlers to this home before any CliRunner swaps the std streams
    configure_logging()
    return tmp_path


@pytest.fixture
def sample_global_config() -> GlobalConfig:
    return GlobalConfig(timeout=5.0, batch_size=3, max_workers=4, queue_size=8)


@pytest.fixture
def storage() -> Iterator[SQLiteManager]:
    manager = SQLiteManager()
    yield manager
    manager.close_all()


@pytest.fixture
def mock_client() -> Iterator[Callable[[dict[str, Route]], tuple[httpx.Client, RecordingTransport]]]:
    clients: list[httpx.Client] = []

    def _builder(routes: dict[str, Route]) -> tuple[httpx.Client, RecordingTransport]:
        transport = RecordingTransport(routes)
        client = httpx.Client(transport=transport, follow_redirects=True)
        clients.append(client)
        return client, transport

    yield _builder
    for client in clients:
        client.close()


@pytest.fixture
def temp_config_repository(tmp_path: Path) -> ConfigRepository:
    return ConfigRepository(ConfigLocator(project_root=tmp_path))
