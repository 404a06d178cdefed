"""API route aggregation.

All routers registered here get mounted in main.py. Every route is
public; there is no auth layer.
"""

from fastapi import APIRouter

from brewery_stream.api.health import router as health_router
from brewery_stream.api.home import router as home_router
from brewery_stream.api.stream import router as stream_router

api_router = APIRouter()

api_router.include_router(home_router, tags=["ui"])
api_router.include_router(stream_router, tags=["stream"])
api_router.include_router(health_router, tags=["health"])
