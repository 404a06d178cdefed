"""Health check endpoint.

Learn: Liveness only. It does not call upstream. A slow or failing
OpenBreweryDB degrades the stream, it does not make the service unhealthy.
"""

from fastapi import APIRouter

router = APIRouter()

SERVICE_NAME = "brewery-stream"


@router.get("/health")
async def health_check():
    """Report that the server is up."""
    return {"status": "ok", "service": SERVICE_NAME}
