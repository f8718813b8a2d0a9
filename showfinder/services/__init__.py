"""
Services for the Showfinder backend.

Upstream clients, payload normalization and the favorites store.

Available Services
------------------
- TicketmasterClient: event search, suggestions and details
- SpotifyClient, TokenCache: artist lookups over a cached client-credentials token
- FavoriteStore: favorites persistence (SQLite locally, Turso for libsql:// URLs)
- normalize: pure mapping of upstream payloads into Showfinder models

Each client is a lazily-created singleton exposed through a ``get_*``
function, so FastAPI routes can take it as a dependency::

    @app.get("/api/events/search")
    async def search(client: TicketmasterClient = Depends(get_ticketmaster_client)):
        ...
"""

from .favorites import (
    FavoriteStore,
    SQLiteFavoriteStore,
    close_favorite_store,
    get_favorite_store,
    init_favorite_store,
)
from .spotify import SpotifyClient, get_spotify_client
from .ticketmaster import TicketmasterClient, get_ticketmaster_client
from .token_cache import TokenCache

__all__ = [
    "FavoriteStore",
    "SQLiteFavoriteStore",
    "close_favorite_store",
    "get_favorite_store",
    "init_favorite_store",
    "SpotifyClient",
    "get_spotify_client",
    "TicketmasterClient",
    "get_ticketmaster_client",
    "TokenCache",
]
