"""Raw payload shapes returned by Ticketmaster and Spotify.

Every field is optional and unknown fields are ignored. These models only
describe what may arrive; the normalization layer decides all defaults.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class UpstreamModel(BaseModel):
    """Lenient base for third-party payloads."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TMModel(UpstreamModel):
    """Ticketmaster payloads use camelCase keys."""

    model_config = ConfigDict(
        extra="ignore", populate_by_name=True, alias_generator=to_camel
    )


# ---------------------------------------------------------------------------
# Ticketmaster
# ---------------------------------------------------------------------------


class TMNamed(TMModel):
    name: str | None = None


class TMImage(TMModel):
    url: str | None = None


class TMLink(TMModel):
    url: str | None = None


class TMStart(TMModel):
    local_date: str | None = None
    local_time: str | None = None


class TMStatus(TMModel):
    code: str | None = None


class TMDates(TMModel):
    start: TMStart | None = None
    status: TMStatus | None = None


class TMClassification(TMModel):
    segment: TMNamed | None = None
    genre: TMNamed | None = None
    sub_genre: TMNamed | None = None
    type: TMNamed | None = None
    sub_type: TMNamed | None = None


class TMAddress(TMModel):
    line1: str | None = None


class TMLocation(TMModel):
    latitude: str | None = None
    longitude: str | None = None


class TMGeneralInfo(TMModel):
    general_rule: str | None = None
    child_rule: str | None = None
    parking_detail: str | None = None


class TMVenue(TMModel):
    name: str | None = None
    address: TMAddress | None = None
    city: TMNamed | None = None
    state: TMNamed | None = None
    country: TMNamed | None = None
    postal_code: str | None = None
    url: str | None = None
    location: TMLocation | None = None
    images: list[TMImage | None] | None = None
    general_info: TMGeneralInfo | None = None


class TMExternalLinks(TMModel):
    twitter: list[TMLink | None] | None = None
    facebook: list[TMLink | None] | None = None


class TMAttraction(TMModel):
    name: str | None = None
    url: str | None = None
    external_links: TMExternalLinks | None = None
    images: list[TMImage | None] | None = None


class TMPriceRange(TMModel):
    type: str | None = None
    currency: str | None = None
    min: float | None = None
    max: float | None = None


class TMSeatmap(TMModel):
    static_url: str | None = None


class TMEventEmbedded(TMModel):
    venues: list[TMVenue | None] | None = None
    attractions: list[TMAttraction | None] | None = None


class TMEvent(TMModel):
    """One event as it appears in search results and detail lookups."""

    id: str | None = None
    name: str | None = None
    url: str | None = None
    dates: TMDates | None = None
    classifications: list[TMClassification | None] | None = None
    images: list[TMImage | None] | None = None
    embedded: TMEventEmbedded | None = Field(default=None, alias="_embedded")


class TMEventDetailResponse(TMEvent):
    """Body of /events/{id}."""

    price_ranges: list[TMPriceRange | None] | None = None
    seatmap: TMSeatmap | None = None


class TMEventsEmbedded(TMModel):
    events: list[TMEvent | None] | None = None


class TMEventsResponse(TMModel):
    """Body of /events.json."""

    embedded: TMEventsEmbedded | None = Field(default=None, alias="_embedded")


class TMSuggestEmbedded(TMModel):
    attractions: list[TMNamed | None] | None = None
    venues: list[TMNamed | None] | None = None
    events: list[TMNamed | None] | None = None


class TMSuggestResponse(TMModel):
    """Body of /suggest."""

    embedded: TMSuggestEmbedded | None = Field(default=None, alias="_embedded")


# ---------------------------------------------------------------------------
# Spotify
# ---------------------------------------------------------------------------


class SpotifyImagePayload(UpstreamModel):
    url: str | None = None


class SpotifyExternalUrls(UpstreamModel):
    spotify: str | None = None


class SpotifyFollowers(UpstreamModel):
    total: int | None = None


class SpotifyArtistPayload(UpstreamModel):
    id: str | None = None
    name: str | None = None
    followers: SpotifyFollowers | None = None
    popularity: int | None = None
    genres: list[str] | None = None
    external_urls: SpotifyExternalUrls | None = None
    images: list[SpotifyImagePayload | None] | None = None


class SpotifyArtistPage(UpstreamModel):
    items: list[SpotifyArtistPayload | None] | None = None


class SpotifySearchPayload(UpstreamModel):
    """Body of /v1/search?type=artist."""

    artists: SpotifyArtistPage | None = None


class SpotifyAlbumPayload(UpstreamModel):
    id: str | None = None
    name: str | None = None
    release_date: str | None = None
    total_tracks: int | None = None
    external_urls: SpotifyExternalUrls | None = None
    images: list[SpotifyImagePayload | None] | None = None


class SpotifyAlbumsPayload(UpstreamModel):
    """Body of /v1/artists/{id}/albums."""

    items: list[SpotifyAlbumPayload | None] | None = None


class SpotifyTokenPayload(UpstreamModel):
    """Body of the client-credentials token endpoint."""

    access_token: str
    expires_in: int = 3600
