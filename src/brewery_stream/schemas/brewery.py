"""Pydantic schemas for upstream and streamed breweries.

Learn: RawBrewery mirrors the OpenBreweryDB JSON object; StreamBrewery is
the shape the browser consumes. Both are frozen, so a record never changes
after it is fetched or built.

Latitude/longitude stay Optional[float] so that "absent" (None) and
"present at zero" (0.0) remain different values.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ─── Upstream ─────────────────────────────────────────────


class RawBrewery(BaseModel):
    """One brewery as returned by /breweries/random."""

    id: str = ""
    name: str = ""
    brewery_type: str = ""
    address_1: str = ""
    city: str = ""
    state_province: str = ""
    postal_code: str = ""
    country: str = ""
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    phone: str = ""
    website_url: str = ""

    model_config = ConfigDict(frozen=True)

    @field_validator(
        "id",
        "name",
        "brewery_type",
        "address_1",
        "city",
        "state_province",
        "postal_code",
        "country",
        "phone",
        "website_url",
        mode="before",
    )
    @classmethod
    def null_as_empty(cls, value):
        # Upstream sends JSON null for most missing text fields
        return "" if value is None else value


# ─── Wire ─────────────────────────────────────────────────


class StreamBrewery(BaseModel):
    """One streamed event. Serialize with model_dump_json(by_alias=True)."""

    name: str
    type: str
    type_color: str = Field(alias="typeColor")
    address: str
    city: str
    state: str
    country: str
    phone: str
    website: str
    map_url: str = Field(alias="mapUrl")
    has_location: bool = Field(alias="hasLocation")

    model_config = ConfigDict(frozen=True, populate_by_name=True)
