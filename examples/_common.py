"""
Shared helpers for Brewery Stream examples.

Checks the server is up so each example can focus on consuming the stream.
"""

import os
import sys

import httpx

BASE = os.environ.get("BREWERY_STREAM_URL", "http://localhost:8080").rstrip("/")


def check_backend() -> None:
    """Verify the server is reachable and healthy."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Server not reachable at {BASE}")
        print("Start it with:  brewery-stream serve")
        sys.exit(1)

    if resp.status_code != 200:
        print(f"ERROR: Health check returned {resp.status_code}")
        sys.exit(1)

    health = resp.json()
    print(f"Server health: {health['status']} ({health['service']})")
