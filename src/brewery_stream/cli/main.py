"""Brewery Stream CLI — run the server, poke upstream, watch a live stream.

Usage:
    brewery-stream serve                       # Run the HTTP server (PORT or 8080)
    brewery-stream serve --port 9000 --reload  # Dev server on another port
    brewery-stream fetch                       # One brewery, wire shape
    brewery-stream fetch --raw                 # One brewery, as upstream sent it
    brewery-stream watch --count 5             # Print events from a running server
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import logging
import sys
from typing import Optional

import click
import httpx
import structlog

from brewery_stream.config import settings
from brewery_stream.services.fetcher import BreweryFetcher, BreweryFetchError

DATA_PREFIX = "data: "

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Offloads to a thread when a loop is already running (e.g. CliRunner
    invoked from inside an async test).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _pretty_json(data: dict) -> str:
    return json.dumps(data, indent=2, default=str)


def _local_url() -> str:
    host = "localhost" if settings.host in ("0.0.0.0", "::") else settings.host
    return f"http://{host}:{settings.port}"


async def _fetch(raw: bool) -> dict:
    async with BreweryFetcher(
        settings.upstream_base_url, timeout=settings.fetch_timeout_seconds
    ) as fetcher:
        if raw:
            return (await fetcher.fetch_raw()).model_dump()
        return (await fetcher.fetch_one()).model_dump(by_alias=True)


async def _watch(
    base_url: str,
    count: Optional[int],
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    """Print events from /stream. Returns how many were received."""
    received = 0
    # No read timeout: gaps between events are expected when upstream is slow
    timeout = httpx.Timeout(10.0, read=None)
    async with httpx.AsyncClient(
        base_url=base_url, timeout=timeout, transport=transport
    ) as client:
        async with client.stream("GET", "/stream") as resp:
            resp.raise_for_status()
            async for line in resp.aiter_lines():
                if not line.startswith(DATA_PREFIX):
                    continue
                brewery = json.loads(line[len(DATA_PREFIX):])
                received += 1
                click.echo(_format_brewery(brewery))
                if count is not None and received >= count:
                    break
    return received


def _format_brewery(brewery: dict) -> str:
    name = click.style(brewery["name"], bold=True)
    return (
        f"{name}  [{brewery['type']}]\n"
        f"    {brewery['address']}, {brewery['city']}, {brewery['state']}, {brewery['country']}\n"
        f"    phone: {brewery['phone']}  web: {brewery['website'] or '-'}"
    )


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
def cli():
    """Brewery Stream — live brewery discovery over Server-Sent Events."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: BREWERY_STREAM_HOST).")
@click.option("--port", type=int, default=None, help="Port (default: PORT or 8080).")
@click.option("--reload", is_flag=True, help="Restart on code changes.")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the HTTP server."""
    import uvicorn

    _configure_logging(settings.log_level)
    # uvicorn logs and exits with status 1 if the socket cannot be bound
    uvicorn.run(
        "brewery_stream.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
    )


@cli.command()
@click.option("--raw", is_flag=True, help="Print the upstream record unmodified.")
def fetch(raw: bool):
    """Fetch one random brewery from upstream and print it."""
    try:
        data = _run(_fetch(raw))
    except BreweryFetchError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    click.echo(_pretty_json(data))


@cli.command()
@click.option("--url", default=None, help="Server base URL (default: local server).")
@click.option("--count", type=int, default=None, help="Stop after N breweries.")
def watch(url: Optional[str], count: Optional[int]):
    """Print breweries from a running server's /stream."""
    base_url = (url or _local_url()).rstrip("/")
    try:
        received = _run(_watch(base_url, count))
    except httpx.HTTPError as e:
        click.secho(f"Error: could not stream from {base_url}: {e}", fg="red", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        return
    click.secho(f"Received {received} brewer{'y' if received == 1 else 'ies'}.", fg="green")


if __name__ == "__main__":
    cli()
