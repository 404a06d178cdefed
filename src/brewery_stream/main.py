"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan only logs: there are no pools or workers to start,
since every stream session owns its own upstream client.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware

from brewery_stream import __version__
from brewery_stream.api import api_router
from brewery_stream.config import settings
from brewery_stream.middleware.request_id import RequestIdMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "brewery_stream.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        upstream=settings.upstream_base_url,
        interval=settings.stream_interval_seconds,
    )

    yield

    logger.info("brewery_stream.shutdown")


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Brewery Stream",
        description="Real-time brewery discovery over Server-Sent Events",
        version=__version__,
        lifespan=lifespan,
    )

    # text/event-stream is passed through uncompressed
    app.add_middleware(GZipMiddleware, minimum_size=500, compresslevel=5)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: brewery_stream.main:app)
app = create_app()
