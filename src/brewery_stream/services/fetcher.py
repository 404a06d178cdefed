"""Upstream fetcher — one random brewery from OpenBreweryDB per call.

Learn: BreweryFetcher owns an httpx.AsyncClient and is used as an async
context manager, so the connection pool lives exactly as long as the
stream session that created it:

    async with BreweryFetcher(base_url, timeout=10.0) as fetcher:
        brewery = await fetcher.fetch_one()

Every failure (transport, timeout, non-2xx, malformed body, empty list)
is raised as BreweryFetchError chained to the original exception. There
are no retries here; the caller decides what a failure means.
"""

import asyncio
from typing import Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from brewery_stream.schemas.brewery import RawBrewery, StreamBrewery
from brewery_stream.services.normalizer import normalize_brewery

DEFAULT_UPSTREAM_URL = "https://api.openbrewerydb.org/v1"
RANDOM_PATH = "/breweries/random"

_brewery_list = TypeAdapter(list[RawBrewery])


class BreweryFetchError(Exception):
    pass


class EmptyResultError(BreweryFetchError):
    pass


class BreweryFetcher:
    def __init__(
        self,
        base_url: str = DEFAULT_UPSTREAM_URL,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "BreweryFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_raw(self) -> RawBrewery:
        """Fetch one brewery exactly as upstream describes it."""
        try:
            # httpx timeouts are per phase; wait_for bounds the whole request
            response = await asyncio.wait_for(
                self._client.get(RANDOM_PATH, params={"size": 1}),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except asyncio.TimeoutError as e:
            raise BreweryFetchError(
                f"upstream did not answer within {self.timeout}s"
            ) from e
        except httpx.HTTPStatusError as e:
            raise BreweryFetchError(
                f"upstream returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise BreweryFetchError(f"upstream request failed: {e!r}") from e

        try:
            breweries = _brewery_list.validate_json(response.content)
        except ValidationError as e:
            raise BreweryFetchError(
                f"malformed upstream body ({e.error_count()} error(s))"
            ) from e

        if not breweries:
            raise EmptyResultError("upstream returned no brewery")
        return breweries[0]

    async def fetch_one(self) -> StreamBrewery:
        """Fetch one brewery in the streamed wire shape."""
        return normalize_brewery(await self.fetch_raw())
