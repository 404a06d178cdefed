"""Server-Sent Events framing for streamed breweries."""

from brewery_stream.schemas.brewery import StreamBrewery

# Content-Type is set here so Starlette does not append a charset
SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "Access-Control-Allow-Origin": "*",
    "X-Accel-Buffering": "no",
}


def encode_event(brewery: StreamBrewery) -> str:
    """Render one brewery as a `data: <json>` event."""
    return f"data: {brewery.model_dump_json(by_alias=True)}\n\n"
