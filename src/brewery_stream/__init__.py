"""Brewery Stream — live discovery of breweries over Server-Sent Events.

Polls OpenBreweryDB for a random brewery, normalizes it into a stable
wire shape, and pushes it to every connected client on a fixed cadence.
"""

__version__ = "0.1.0"
