"""Brewery event stream endpoint.

Learn: The handler only wires things together; the loop lives in
StreamSession. get_fetcher_factory() is a FastAPI dependency so tests can
swap the upstream for a fake via app.dependency_overrides.

The session builds its fetcher inside the response generator (not in a
yield-dependency), because dependency teardown may run before a
StreamingResponse has finished sending.
"""

from functools import partial

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from brewery_stream.config import settings
from brewery_stream.realtime.session import (
    FetcherFactory,
    StreamingUnsupportedError,
    StreamSession,
)
from brewery_stream.services.fetcher import BreweryFetcher

router = APIRouter()


def get_fetcher_factory() -> FetcherFactory:
    """Factory for a per-connection upstream fetcher."""
    return partial(
        BreweryFetcher,
        settings.upstream_base_url,
        timeout=settings.fetch_timeout_seconds,
    )


@router.get("/stream")
async def stream_breweries(
    request: Request,
    fetcher_factory: FetcherFactory = Depends(get_fetcher_factory),
):
    """Push a freshly discovered brewery every few seconds until disconnect."""
    session = StreamSession(
        fetcher_factory,
        interval=settings.stream_interval_seconds,
        is_disconnected=request.is_disconnected,
        poll_interval=settings.disconnect_poll_seconds,
    )
    try:
        session.start(request.scope)
    except StreamingUnsupportedError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return StreamingResponse(session.events(), headers=session.headers)
