"""Root page — the static browser UI for the stream."""

from importlib.resources import files

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def home():
    page = files("brewery_stream") / "static" / "index.html"
    return HTMLResponse(page.read_text(encoding="utf-8"))
