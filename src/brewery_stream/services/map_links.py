"""Map search links for a brewery's address."""

from urllib.parse import quote_plus

MAP_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query="

# Placeholders written by the normalizer; they only add noise to a search
UNKNOWN_STATE = "N/A"
UNKNOWN_COUNTRY = "Unknown"


def build_map_url(
    name: str,
    address: str,
    city: str,
    state: str,
    country: str,
) -> str:
    """Build a map search URL, or "" when there is nothing to search for.

    Takes the already-normalized city/state/country, so the state and
    country placeholders are filtered back out here.
    """
    parts = [part for part in (name, address, city) if part]
    if state and state != UNKNOWN_STATE:
        parts.append(state)
    if country and country != UNKNOWN_COUNTRY:
        parts.append(country)

    if not parts:
        return ""

    return MAP_SEARCH_URL + quote_plus(", ".join(parts))
