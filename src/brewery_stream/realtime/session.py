"""Stream session — one client connection's fetch/push loop.

Learn: Each GET /stream gets its own StreamSession:

  STARTING → ACTIVE → CLOSED

1. start() checks that the connection is HTTP, so chunks can go out as
   they are produced. If not, the session closes without ever sending an
   event.
2. events() is the async generator handed to StreamingResponse. It runs
   one fetch cycle immediately, then one per interval tick. The ASGI
   server sends each yielded frame before asking for the next one, so
   cycles never overlap and frames go out in fetch order.
3. A failed fetch is logged and the tick is skipped. Upstream trouble
   never ends the stream. Only a client disconnect, close(), or server
   shutdown does.

Sessions share nothing: each one builds (and closes) its own fetcher.
"""

import asyncio
import enum
from typing import (
    AsyncContextManager,
    AsyncIterator,
    Awaitable,
    Callable,
    Optional,
    Protocol,
)

import structlog

from brewery_stream.realtime.sse import SSE_HEADERS, encode_event
from brewery_stream.schemas.brewery import StreamBrewery
from brewery_stream.services.fetcher import BreweryFetchError

logger = structlog.get_logger()


class StreamingUnsupportedError(Exception):
    pass


class SessionState(str, enum.Enum):
    STARTING = "starting"
    ACTIVE = "active"
    CLOSED = "closed"


class Fetcher(Protocol):
    async def fetch_one(self) -> StreamBrewery:
        ...


FetcherFactory = Callable[[], AsyncContextManager[Fetcher]]
DisconnectProbe = Callable[[], Awaitable[bool]]


class StreamSession:
    def __init__(
        self,
        fetcher_factory: FetcherFactory,
        *,
        interval: float = 3.0,
        is_disconnected: Optional[DisconnectProbe] = None,
        poll_interval: float = 0.5,
    ):
        self.interval = interval
        self.poll_interval = poll_interval
        self.state = SessionState.STARTING
        self.events_sent = 0
        self.failures = 0
        self._fetcher_factory = fetcher_factory
        self._is_disconnected = is_disconnected
        self._closed = asyncio.Event()
        self._next_tick = 0.0

    @property
    def headers(self) -> dict[str, str]:
        return dict(SSE_HEADERS)

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def start(self, scope: dict) -> None:
        """Verify the connection can be streamed to.

        Raises StreamingUnsupportedError (and closes the session) for a
        non-HTTP scope. Any HTTP version works: ASGI servers send each
        more_body chunk as it is produced, and an HTTP/1.0 body without a
        length simply runs until the connection closes.
        """
        if self.state is not SessionState.STARTING:
            raise RuntimeError(f"Session already {self.state.value}")

        http_version = scope.get("http_version")
        if scope.get("type") != "http":
            self.close()
            self.state = SessionState.CLOSED
            logger.warning(
                "stream.unsupported_transport",
                scope_type=scope.get("type"),
                http_version=http_version,
            )
            raise StreamingUnsupportedError("SSE not supported")

    def close(self) -> None:
        """End the session from the server side. Safe to call repeatedly."""
        self._closed.set()

    async def events(self) -> AsyncIterator[str]:
        """Yield SSE frames until the session closes."""
        if self.state is not SessionState.STARTING:
            raise RuntimeError(f"Session already {self.state.value}")
        self.state = SessionState.ACTIVE

        loop = asyncio.get_running_loop()
        watcher = None
        if self._is_disconnected is not None:
            watcher = asyncio.create_task(self._watch_disconnect())
        logger.info("stream.session_opened", interval=self.interval)

        try:
            async with self._fetcher_factory() as fetcher:
                self._next_tick = loop.time() + self.interval
                while True:
                    frame = await self._cycle(fetcher)
                    if frame is not None:
                        # Count first; the consumer may never resume the generator
                        self.events_sent += 1
                        yield frame
                    if not await self._wait_for_tick(loop):
                        break
        finally:
            if watcher is not None:
                watcher.cancel()
            self._closed.set()
            self.state = SessionState.CLOSED
            logger.info(
                "stream.session_closed",
                events_sent=self.events_sent,
                failures=self.failures,
            )

    async def _cycle(self, fetcher: Fetcher) -> Optional[str]:
        """Fetch + encode one brewery. None means nothing to send this tick."""
        fetch = asyncio.ensure_future(fetcher.fetch_one())
        closed = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait({fetch, closed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (fetch, closed):
                if not task.done():
                    task.cancel()

        # Closed while fetching: whatever came back is discarded
        if self._closed.is_set():
            if fetch.done() and not fetch.cancelled():
                fetch.exception()  # retrieved, so asyncio does not warn
            return None

        try:
            return encode_event(fetch.result())
        except BreweryFetchError as e:
            self.failures += 1
            logger.warning("stream.fetch_failed", error=str(e), failures=self.failures)
        except (ValueError, TypeError) as e:
            self.failures += 1
            logger.warning("stream.encode_failed", error=str(e), failures=self.failures)
        return None

    async def _wait_for_tick(self, loop: asyncio.AbstractEventLoop) -> bool:
        """Sleep until the next tick. False if the session closed instead."""
        delay = self._schedule_next(loop.time())
        try:
            await asyncio.wait_for(self._closed.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return True
        return False

    def _schedule_next(self, now: float) -> float:
        """Ticks fall on start + k*interval; overrun ticks collapse into one."""
        due = self._next_tick
        if due > now:
            self._next_tick = due + self.interval
            return due - now
        while self._next_tick <= now:
            self._next_tick += self.interval
        return 0.0

    async def _watch_disconnect(self) -> None:
        while not self._closed.is_set():
            if await self._is_disconnected():
                logger.info("stream.client_disconnected")
                self.close()
                return
            await asyncio.sleep(self.poll_interval)
