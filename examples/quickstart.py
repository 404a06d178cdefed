#!/usr/bin/env python3
"""
Brewery Stream Quickstart — read a few live events and tally them.

Connects to /stream, prints each brewery as it arrives, and keeps the
same counters the browser UI shows (discovered, countries, types).
Run with: python examples/quickstart.py [count]

Requires: pip install httpx
Server must be running: http://localhost:8080
"""

import json
import sys

import httpx

from _common import BASE, check_backend


def main():
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 5

    check_backend()

    countries = set()
    types = set()
    received = 0

    print(f"\nStreaming {count} breweries (one every ~3s)...")
    # No read timeout: a slow upstream only means a longer gap between events
    timeout = httpx.Timeout(10.0, read=None)
    with httpx.stream("GET", f"{BASE}/stream", timeout=timeout) as resp:
        resp.raise_for_status()
        for line in resp.iter_lines():
            if not line.startswith("data: "):
                continue
            brewery = json.loads(line[len("data: "):])
            received += 1
            countries.add(brewery["country"])
            types.add(brewery["type"])

            print(f"\n{received}. {brewery['name']}  [{brewery['type']}]")
            print(f"   {brewery['city']}, {brewery['state']}, {brewery['country']}")
            if brewery["mapUrl"]:
                print(f"   map: {brewery['mapUrl']}")
            if received >= count:
                break

    print(f"\nDiscovered: {received}  Countries: {len(countries)}  Types: {len(types)}")


if __name__ == "__main__":
    main()
