"""API data models for Showfinder."""

from .events import (
    ArtistInfo,
    Coordinates,
    Event,
    EventDetail,
    PriceRange,
    SearchParams,
    SuggestionsResponse,
    VenueInfo,
    VenueLocation,
)
from .favorites import (
    AddFavoriteResult,
    FavoriteEvent,
    FavoriteEventPayload,
    RemoveFavoriteResponse,
    utc_timestamp,
)
from .spotify import (
    SpotifyAlbumInfo,
    SpotifyArtistInfo,
    SpotifyArtistResponse,
    SpotifyToken,
)

__all__ = [
    "AddFavoriteResult",
    "ArtistInfo",
    "Coordinates",
    "Event",
    "EventDetail",
    "FavoriteEvent",
    "FavoriteEventPayload",
    "PriceRange",
    "RemoveFavoriteResponse",
    "SearchParams",
    "SpotifyAlbumInfo",
    "SpotifyArtistInfo",
    "SpotifyArtistResponse",
    "SpotifyToken",
    "SuggestionsResponse",
    "VenueInfo",
    "VenueLocation",
    "utc_timestamp",
]
