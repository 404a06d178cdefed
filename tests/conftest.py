"""Test fixtures — a fake upstream and clients for the ASGI app.

Learn: Two ways to talk to the app:

1. `client` — httpx.AsyncClient over ASGITransport, for routes that
   finish (/, /health). ASGITransport waits for the whole body, so it
   cannot be used on /stream.
2. `stream_driver` — calls the ASGI app directly with a receive channel
   that reports a client disconnect once N events have arrived. This is
   exactly what a browser closing the EventSource looks like to the app.

The upstream is swapped through app.dependency_overrides so no test
touches the network.
"""

import asyncio
import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from brewery_stream.api.stream import get_fetcher_factory
from brewery_stream.config import settings
from brewery_stream.main import app
from brewery_stream.schemas.brewery import RawBrewery
from brewery_stream.services.normalizer import normalize_brewery


def make_raw(**overrides) -> RawBrewery:
    data = {
        "id": "b-1",
        "name": "Acme Brewing",
        "brewery_type": "micro",
        "address_1": "1 Main St",
        "city": "Springfield",
        "state_province": "Oregon",
        "postal_code": "97477",
        "country": "United States",
        "longitude": -123.02,
        "latitude": 44.05,
        "phone": "5551234567",
        "website_url": "https://acme.example",
    }
    data.update(overrides)
    return RawBrewery(**data)


class FakeFetcher:
    """Stands in for BreweryFetcher; fetch_one is an AsyncMock."""

    def __init__(self, side_effect=None):
        self.fetch_one = AsyncMock(side_effect=side_effect)
        self.entered = False
        self.exited = False

    @asynccontextmanager
    async def session(self):
        self.entered = True
        try:
            yield self
        finally:
            self.exited = True

    def factory(self):
        return self.session


@pytest.fixture()
def brewery():
    return normalize_brewery(make_raw())


@pytest.fixture()
def fast_stream(monkeypatch):
    """Shrink session timings so stream tests run in milliseconds."""
    monkeypatch.setattr(settings, "stream_interval_seconds", 0.01)
    monkeypatch.setattr(settings, "disconnect_poll_seconds", 0.005)


@pytest_asyncio.fixture()
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture()
def use_fetcher():
    """Route /stream upstream calls to a FakeFetcher."""

    def _use(fake: FakeFetcher) -> FakeFetcher:
        app.dependency_overrides[get_fetcher_factory] = fake.factory
        return fake

    yield _use
    app.dependency_overrides.clear()


class StreamResult:
    def __init__(self):
        self.status = None
        self.headers: dict[str, str] = {}
        self.chunks: list[str] = []

    @property
    def events(self) -> list[dict]:
        body = "".join(self.chunks)
        return [
            json.loads(frame[len("data: "):])
            for frame in body.split("\n\n")
            if frame.startswith("data: ")
        ]


@pytest.fixture()
def stream_driver():
    """Run GET /stream until `events` frames arrive, then disconnect."""

    async def _drive(
        events: int = 1,
        *,
        http_version: str = "1.1",
        headers=(),
        timeout: float = 5.0,
    ):
        result = StreamResult()
        disconnected = asyncio.Event()
        request_sent = False

        async def receive():
            nonlocal request_sent
            if not request_sent:
                request_sent = True
                return {"type": "http.request", "body": b"", "more_body": False}
            await disconnected.wait()
            return {"type": "http.disconnect"}

        async def send(message):
            if message["type"] == "http.response.start":
                result.status = message["status"]
                result.headers = {
                    k.decode().lower(): v.decode() for k, v in message["headers"]
                }
            elif message["type"] == "http.response.body":
                chunk = message.get("body", b"").decode()
                if chunk:
                    result.chunks.append(chunk)
                if len(result.events) >= events or not message.get("more_body"):
                    disconnected.set()

        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": http_version,
            "method": "GET",
            "scheme": "http",
            "path": "/stream",
            "raw_path": b"/stream",
            "root_path": "",
            "query_string": b"",
            "headers": [(b"host", b"test"), (b"accept", b"text/event-stream"), *headers],
            "client": ("127.0.0.1", 50000),
            "server": ("test", 80),
        }
        await asyncio.wait_for(app(scope, receive, send), timeout=timeout)
        return result

    return _drive
