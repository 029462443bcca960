"""Shared test fixtures for rest_api_provider.

Every test starts from the default configuration, no installed requester
and a fresh OutputManager.  Network access is simulated with
:class:`httpx.MockTransport`; the :func:`mock_api` fixture installs one
that serves canned JSON per URL and records every request it receives.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from rest_api_provider.client import Requester, reset_requester, set_requester
from rest_api_provider.config import configure, reset
from rest_api_provider.output import OutputFormat, OutputManager, reset_output, set_output

API_ROOT = "http://api.example.com"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state() -> None:
    """Restore the default configuration, requester and output after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner replaces those streams, so a stale manager
    would write to closed files in the next test.
    """
    reset()
    reset_requester()
    yield
    reset()
    reset_requester()
    reset_output()


@pytest.fixture
def api_root() -> str:
    """Point the configuration at the fake API root used by :func:`mock_api`."""
    configure(api_root=API_ROOT)
    return API_ROOT


# ---------------------------------------------------------------------------
# Fake API
# ---------------------------------------------------------------------------


class FakeApi:
    """Route table for :class:`httpx.MockTransport` plus a request log.

    ``routes`` maps ``(METHOD, path-or-url)`` to either a JSON-able payload
    (served with status 200), a ``(status, payload)`` tuple, or a callable
    taking the :class:`httpx.Request` and returning an :class:`httpx.Response`.
    Unknown routes answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, target: str, payload: Any, status: int = 200) -> None:
        self.routes[(method.upper(), target)] = (status, payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, _without_query(request.url)))
        if route is None:
            route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        if callable(route):
            return route(request)
        status, payload = route
        if payload is None:
            return httpx.Response(status)
        if isinstance(payload, (bytes, str)):
            return httpx.Response(status, content=payload)
        return httpx.Response(status, json=payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def count(self, method: str, target: str) -> int:
        return sum(
            1
            for r in self.requests
            if r.method == method.upper()
            and (r.url.path == target or _without_query(r.url) == target)
        )

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def mock_api(api_root: str) -> FakeApi:
    """Install a Requester backed by a :class:`FakeApi` and return the fake."""
    fake = FakeApi()
    set_requester(Requester(transport=httpx.MockTransport(fake.handler)))
    return fake


@pytest.fixture
def transport_factory() -> Callable[[Callable[[httpx.Request], httpx.Response]], Requester]:
    """Install a Requester around an arbitrary MockTransport handler."""

    def _install(handler: Callable[[httpx.Request], httpx.Response]) -> Requester:
        requester = Requester(transport=httpx.MockTransport(handler))
        set_requester(requester)
        return requester

    return _install


# ---------------------------------------------------------------------------
# Output / CLI fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


def _without_query(url: httpx.URL) -> str:
    return str(url).split("?", 1)[0]
