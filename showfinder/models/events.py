"""Event models returned by search and detail lookups."""

from pydantic import Field

from showfinder.models.base import CamelModel


class Event(CamelModel):
    """An event from search results.

    Every field defaults to an empty string so nothing is null on the wire.
    """

    id: str = ""
    name: str = ""
    date: str = Field(default="", description="Local date, YYYY-MM-DD")
    time: str = Field(default="", description="Local 24h time, HH:MM:SS")
    venue: str = ""
    genre: str = ""
    image: str = ""
    url: str = ""


class VenueLocation(CamelModel):
    """Venue coordinates as provided upstream (strings)."""

    latitude: str | None = None
    longitude: str | None = None


class VenueInfo(CamelModel):
    """Structured venue information for the detail view."""

    name: str = ""
    address: str = Field(default="", description="Non-empty address parts joined by ', '")
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    location: VenueLocation | None = None
    url: str | None = None
    image: str | None = None
    parking_detail: str | None = None
    general_rule: str | None = None
    child_rule: str | None = None


class ArtistInfo(CamelModel):
    """A performer attached to an event."""

    name: str
    url: str | None = None
    twitter: str | None = None
    facebook: str | None = None
    image: str | None = None


class PriceRange(CamelModel):
    """Ticket price range, passed through from the provider."""

    type: str | None = None
    currency: str | None = None
    min: float | None = None
    max: float | None = None


class EventDetail(CamelModel):
    """Full event detail."""

    id: str
    name: str = ""
    url: str = ""
    date: str = ""
    time: str = ""
    status: str = Field(default="", description="Ticket sale status code")
    venue: VenueInfo | None = None
    genres: list[str] = Field(default_factory=list)
    artists: list[ArtistInfo] = Field(default_factory=list)
    price_ranges: list[PriceRange] = Field(default_factory=list)
    seatmap_url: str | None = None


class SearchParams(CamelModel):
    """Validated parameters for an event search."""

    keyword: str
    category: str = "All"
    lat: float
    lng: float
    distance: int = 10


class SuggestionsResponse(CamelModel):
    """Keyword suggestions."""

    suggestions: list[str] = Field(default_factory=list)


class Coordinates(CamelModel):
    """A geocoded point."""

    lat: float
    lng: float
