"""GET /stream tests — headers, framing, resilience, disconnect.

Learn: These go through the real FastAPI app (routing, dependency
injection, middleware, StreamingResponse) with only the upstream faked.
The driver disconnects as soon as the wanted number of events arrived,
which is how these tests terminate an otherwise endless response.
"""

import json
from unittest.mock import patch

import pytest

from brewery_stream.api.stream import get_fetcher_factory
from brewery_stream.config import settings
from brewery_stream.realtime.session import StreamingUnsupportedError, StreamSession
from brewery_stream.services.fetcher import BreweryFetcher, BreweryFetchError

from conftest import FakeFetcher


@pytest.mark.asyncio
async def test_stream_headers(stream_driver, use_fetcher, fast_stream, brewery):
    use_fetcher(FakeFetcher(side_effect=lambda: brewery))

    result = await stream_driver(events=1)

    assert result.status == 200
    assert result.headers["content-type"] == "text/event-stream"
    assert result.headers["cache-control"] == "no-cache"
    assert result.headers["connection"] == "keep-alive"
    assert result.headers["access-control-allow-origin"] == "*"
    assert result.headers["x-accel-buffering"] == "no"


@pytest.mark.asyncio
async def test_stream_delivers_wire_records(stream_driver, use_fetcher, fast_stream, brewery):
    fake = use_fetcher(FakeFetcher(side_effect=lambda: brewery))

    result = await stream_driver(events=3)

    assert len(result.events) >= 3
    event = result.events[0]
    assert list(event) == [
        "name", "type", "typeColor", "address", "city", "state",
        "country", "phone", "website", "mapUrl", "hasLocation",
    ]
    assert event["name"] == "Acme Brewing"
    assert event["phone"] == "(555) 123-4567"
    assert event["hasLocation"] is True
    assert fake.entered and fake.exited


@pytest.mark.asyncio
async def test_every_chunk_is_a_complete_event(stream_driver, use_fetcher, fast_stream, brewery):
    use_fetcher(FakeFetcher(side_effect=lambda: brewery))

    result = await stream_driver(events=2)

    for chunk in result.chunks:
        assert chunk.startswith("data: ")
        assert chunk.endswith("\n\n")


@pytest.mark.asyncio
async def test_upstream_failures_never_reach_the_client(
    stream_driver, use_fetcher, fast_stream, brewery
):
    fake = use_fetcher(FakeFetcher(side_effect=[
        BreweryFetchError("timeout"),
        BreweryFetchError("HTTP 500"),
        brewery,
    ] + [brewery] * 50))

    result = await stream_driver(events=1)

    assert result.status == 200
    assert result.events[0]["name"] == "Acme Brewing"
    assert all(chunk.startswith("data: {") for chunk in result.chunks)
    assert fake.fetch_one.await_count >= 3


@pytest.mark.asyncio
async def test_http_10_client_gets_a_stream(stream_driver, use_fetcher, fast_stream, brewery):
    """HTTP/1.0 is what nginx speaks to its upstream by default."""
    use_fetcher(FakeFetcher(side_effect=lambda: brewery))

    result = await stream_driver(events=2, http_version="1.0")

    assert result.status == 200
    assert result.headers["content-type"] == "text/event-stream"
    assert len(result.events) >= 2
    assert result.events[0]["name"] == "Acme Brewing"


@pytest.mark.asyncio
async def test_unsupported_transport_is_a_500(stream_driver, use_fetcher, brewery):
    fake = use_fetcher(FakeFetcher(side_effect=lambda: brewery))

    with patch.object(
        StreamSession,
        "start",
        side_effect=StreamingUnsupportedError("SSE not supported"),
    ):
        result = await stream_driver(events=1)

    assert result.status == 500
    assert result.events == []
    assert json.loads("".join(result.chunks)) == {"detail": "SSE not supported"}
    fake.fetch_one.assert_not_called()


@pytest.mark.asyncio
async def test_stream_is_not_compressed(stream_driver, use_fetcher, fast_stream, brewery):
    """Gzip would hold frames back in its buffer; events go out as plain text."""
    use_fetcher(FakeFetcher(side_effect=lambda: brewery))

    result = await stream_driver(events=2, headers=[(b"accept-encoding", b"gzip")])

    assert result.status == 200
    assert "content-encoding" not in result.headers
    assert len(result.events) >= 2


@pytest.mark.asyncio
async def test_default_fetcher_factory_uses_settings(monkeypatch):
    monkeypatch.setattr(settings, "upstream_base_url", "https://breweries.test/v1")
    monkeypatch.setattr(settings, "fetch_timeout_seconds", 2.5)

    fetcher = get_fetcher_factory()()

    assert isinstance(fetcher, BreweryFetcher)
    assert fetcher.timeout == 2.5
    assert str(fetcher._client.base_url) == "https://breweries.test/v1/"
    await fetcher.aclose()
