"""Shared fixtures: an in-memory stand-in for the repository's HTTP surface."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from typing import Any, Callable
from urllib.parse import parse_qsl

import httpx
import pytest

from sling_mcp.client import SlingClient
from sling_mcp.models import APIConfiguration

BASE_URL = "http://sling.test"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeRepository:
    """Routes requests by (method, path) and records everything it receives.

    Unrouted requests answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Handler]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        text: str | None = None,
    ) -> None:
        """Queue a canned answer; repeated routes answer in order, the last one sticks."""

        def respond(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            if json_body is not None:
                return httpx.Response(status, json=json_body)
            return httpx.Response(status)

        self.routes.setdefault((method, path), []).append(respond)

    def add_handler(self, method: str, path: str, handler: Handler) -> None:
        self.routes.setdefault((method, path), []).append(handler)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handlers = self.routes.get((request.method, request.url.path))
        if not handlers:
            return httpx.Response(404)
        handler = handlers.pop(0) if len(handlers) > 1 else handlers[0]
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def posts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]


def form_pairs(request: httpx.Request) -> list[tuple[str, str]]:
    """Decoded (key, value) pairs of a form POST, in wire order."""
    return parse_qsl(request.content.decode("utf-8"), keep_blank_values=True)


@pytest.fixture
def repo() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def make_client(repo: FakeRepository) -> Iterator[Callable[..., SlingClient]]:
    """Factory for clients wired to the fake repository; all are closed at teardown."""
    clients: list[SlingClient] = []

    def _make(path: str | None = "/content", location: str = "") -> SlingClient:
        config = APIConfiguration(base_url=BASE_URL, location=location)
        client = SlingClient(config, path=path, transport=repo.transport)
        clients.append(client)
        return client

    yield _make

    for client in clients:
        asyncio.run(client.close())


@pytest.fixture
def sample_document() -> dict[str, Any]:
    return {"title": "Hi", "tags": ["a", "b"], "child": {"n": "1"}}


@pytest.fixture
def decode_form() -> Callable[[httpx.Request], list[tuple[str, str]]]:
    return form_pairs
