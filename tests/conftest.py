"""
tests.conftest

Shared fixtures: settings factory and a scripted fake of the upstream platform.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from design_bridge.settings import Settings

UPSTREAM_URL = "http://upstream.test"
LONG_TOKEN = "eyJ" + "a" * 80

Responder = Callable[[httpx.Request], httpx.Response]


class FakeUpstream:
    """
    Routes `(method, path)` to a responder and records every request.
    Unrouted requests answer 404.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], Responder] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, responder: Responder) -> None:
        self._routes[(method, path)] = responder

    def json(self, method: str, path: str, body: Any, status_code: int = 200) -> None:
        self.on(method, path, lambda _: httpx.Response(status_code, json=body))

    def timeout(self, method: str, path: str) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        self.on(method, path, _raise)

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self._routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, json={"code": "rest_no_route"})
        return responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {"env": "test", "upstream_base_url": UPSTREAM_URL}
        values.update(overrides)
        return Settings(**values)

    return _make
