"""Brewery normalization — upstream record → wire record.

Learn: normalize_brewery() is a pure, total function. Every text field of
the result is either the upstream value or a fixed placeholder, never None,
so the browser can render it without null checks.

The category tables are read-only mappings with an explicit fallback:
unknown codes keep their code as the label and get the neutral color.
"""

from types import MappingProxyType

from brewery_stream.schemas.brewery import RawBrewery, StreamBrewery
from brewery_stream.services.map_links import (
    UNKNOWN_COUNTRY,
    UNKNOWN_STATE,
    build_map_url,
)

ADDRESS_NOT_AVAILABLE = "Address not available"
PHONE_NOT_AVAILABLE = "Not available"
UNKNOWN_CITY = "Unknown"

DEFAULT_TYPE_COLOR = "bg-gray-500"

BREWERY_TYPE_LABELS = MappingProxyType({
    "micro": "Micro Brewery",
    "nano": "Nano Brewery",
    "regional": "Regional Brewery",
    "brewpub": "Brewpub",
    "large": "Large Brewery",
    "planning": "Planning",
    "bar": "Bar",
    "contract": "Contract Brewing",
    "proprietor": "Proprietor",
    "closed": "Closed",
})

BREWERY_TYPE_COLORS = MappingProxyType({
    "micro": "bg-amber-500",
    "nano": "bg-yellow-500",
    "regional": "bg-orange-500",
    "brewpub": "bg-green-500",
    "large": "bg-blue-500",
    "planning": "bg-purple-500",
    "bar": "bg-pink-500",
    "contract": "bg-indigo-500",
    "proprietor": "bg-teal-500",
    "closed": DEFAULT_TYPE_COLOR,
})


def format_brewery_type(code: str) -> str:
    return BREWERY_TYPE_LABELS.get(code, code)


def brewery_type_color(code: str) -> str:
    return BREWERY_TYPE_COLORS.get(code, DEFAULT_TYPE_COLOR)


def format_phone(phone: str) -> str:
    """Format a 10-character phone as (DDD) DDD-DDDD; leave anything else as-is.

    Purely positional: the characters are not checked to be digits.
    """
    if len(phone) == 10:
        return f"({phone[:3]}) {phone[3:6]}-{phone[6:]}"
    return phone


def normalize_brewery(raw: RawBrewery) -> StreamBrewery:
    """Map an upstream brewery to the streamed wire shape."""
    city = raw.city or UNKNOWN_CITY
    state = raw.state_province or UNKNOWN_STATE
    country = raw.country or UNKNOWN_COUNTRY

    return StreamBrewery(
        name=raw.name,
        type=format_brewery_type(raw.brewery_type),
        type_color=brewery_type_color(raw.brewery_type),
        address=raw.address_1 or ADDRESS_NOT_AVAILABLE,
        city=city,
        state=state,
        country=country,
        phone=format_phone(raw.phone) if raw.phone else PHONE_NOT_AVAILABLE,
        website=raw.website_url,
        # The raw street line: an empty one adds nothing to the search
        map_url=build_map_url(raw.name, raw.address_1, city, state, country),
        has_location=raw.latitude is not None and raw.longitude is not None,
    )
