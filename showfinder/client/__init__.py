"""
Client side of Showfinder.

- ShowfinderClient: typed access to the HTTP API
- FavoritesCache: favorites list kept in step with the server
- SearchController: search form state, suggestions and results
- GeocodingClient, IPInfoClient: location lookups for the search form
"""

from .api import ShowfinderClient
from .favorites import (
    FavoritesCache,
    FavoriteStatus,
    ToggleAction,
    ToggleOutcome,
    favorite_payload_from_detail,
)
from .location import GeocodingClient, IPInfoClient
from .search import SearchController, SearchForm, sort_results
from .sequencing import Debouncer, RequestSequencer

__all__ = [
    "Debouncer",
    "FavoriteStatus",
    "FavoritesCache",
    "GeocodingClient",
    "IPInfoClient",
    "RequestSequencer",
    "SearchController",
    "SearchForm",
    "ShowfinderClient",
    "ToggleAction",
    "ToggleOutcome",
    "favorite_payload_from_detail",
    "sort_results",
]
