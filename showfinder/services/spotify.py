"""
Spotify Web API client for artist lookups.

Uses the client-credentials flow. The access token is kept in a TokenCache
owned by the client; refreshes are single-flight so concurrent callers that
find the token expired share one token request.
"""

import asyncio
import logging
import time
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PayloadError

from showfinder.config import get_settings
from showfinder.errors import ConfigurationError, UpstreamError
from showfinder.models import SpotifyArtistResponse
from showfinder.models.upstream import (
    SpotifyAlbumsPayload,
    SpotifySearchPayload,
    SpotifyTokenPayload,
)
from showfinder.services.normalize import normalize_albums, to_spotify_artist
from showfinder.services.token_cache import TokenCache

logger = logging.getLogger(__name__)

# Albums requested from Spotify vs. albums returned to callers
ALBUM_FETCH_LIMIT = 24
ALBUM_DISPLAY_LIMIT = 8


class SpotifyClient:
    """Async client for Spotify artist and album lookups."""

    TOKEN_URL = "https://accounts.spotify.com/api/token"
    API_BASE_URL = "https://api.spotify.com/v1"
    MARKET = "US"

    def __init__(
        self,
        client_id: str = "",
        client_secret: str = "",
        cache: TokenCache | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.cache = cache or TokenCache()
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._refresh_lock = asyncio.Lock()

    def is_configured(self) -> bool:
        """Check if client credentials are present."""
        return bool(self.client_id and self.client_secret)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        try:
            return await client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise UpstreamError(f"Spotify request failed: {e}") from e

    async def get_access_token(self) -> str:
        """Return a valid access token, requesting a new one when needed.

        Raises:
            ConfigurationError: If client credentials are missing
            UpstreamError: If the token endpoint fails
        """
        if not self.is_configured():
            raise ConfigurationError("Spotify credentials are missing")

        token = self.cache.get()
        if token:
            return token

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            token = self.cache.get()
            if token:
                return token
            return await self._refresh_token()

    async def _refresh_token(self) -> str:
        now = self.cache.clock()
        logger.debug("🔑 [Spotify] Requesting access token")

        response = await self._send(
            "POST",
            self.TOKEN_URL,
            data={"grant_type": "client_credentials"},
            auth=(self.client_id, self.client_secret),
        )
        if not response.is_success:
            raise UpstreamError(
                f"Spotify token error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            payload = SpotifyTokenPayload.model_validate(response.json())
        except (PayloadError, ValueError) as e:
            raise UpstreamError(f"Spotify token response was malformed: {e}") from e

        logger.debug("✅ [Spotify] Token refreshed | expires_in=%ds", payload.expires_in)
        return self.cache.set(payload.access_token, payload.expires_in, now=now)

    async def get_artist(self, name: str) -> SpotifyArtistResponse:
        """
        Look up the best-matching artist and their albums.

        Args:
            name: Artist name to search for

        Returns:
            SpotifyArtistResponse; `artist` is None when the name is blank or
            nothing matched. Albums are de-duplicated and capped.

        Raises:
            ConfigurationError: If client credentials are missing
            UpstreamError: If the token or search request fails
        """
        if not name or not name.strip():
            return SpotifyArtistResponse()

        token = await self.get_access_token()
        headers = {"Authorization": f"Bearer {token}"}
        start_time = time.perf_counter()

        response = await self._send(
            "GET",
            f"{self.API_BASE_URL}/search",
            params={"q": name.strip(), "type": "artist", "limit": 1},
            headers=headers,
        )
        if not response.is_success:
            raise UpstreamError(
                f"Spotify search error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            search = SpotifySearchPayload.model_validate(response.json())
        except (PayloadError, ValueError) as e:
            raise UpstreamError(f"Spotify search response was malformed: {e}") from e

        items = search.artists.items if search.artists else None
        raw_artist = items[0] if items else None
        if raw_artist is None or not raw_artist.id:
            logger.debug("📭 [Spotify] No artist match | name=%s", name)
            return SpotifyArtistResponse()

        artist = to_spotify_artist(raw_artist)
        albums = await self._get_albums(artist.id, headers)

        logger.debug(
            "✅ [Spotify] Artist complete | name=%s albums=%d duration=%.2fs",
            artist.name,
            len(albums),
            time.perf_counter() - start_time,
        )
        return SpotifyArtistResponse(artist=artist, albums=albums)

    async def _get_albums(self, artist_id: str, headers: dict[str, str]):
        try:
            response = await self._send(
                "GET",
                f"{self.API_BASE_URL}/artists/{quote(artist_id, safe='')}/albums",
                params={
                    "include_groups": "album",
                    "limit": ALBUM_FETCH_LIMIT,
                    "market": self.MARKET,
                },
                headers=headers,
            )
        except UpstreamError as e:
            logger.warning("Spotify albums request failed for %s: %s", artist_id, e)
            return []
        if not response.is_success:
            logger.warning(
                "Spotify albums request failed for %s: %s, returning no albums",
                artist_id,
                response.status_code,
            )
            return []

        try:
            payload = SpotifyAlbumsPayload.model_validate(response.json())
        except (PayloadError, ValueError) as e:
            logger.warning("Spotify albums response was malformed: %s", e)
            return []

        return normalize_albums(payload.items)[:ALBUM_DISPLAY_LIMIT]


# Singleton instance
_client: SpotifyClient | None = None


def get_spotify_client() -> SpotifyClient:
    """Get the singleton Spotify client."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = SpotifyClient(
            client_id=settings.spotify_client_id,
            client_secret=settings.spotify_client_secret,
            timeout=settings.http_timeout,
        )
    return _client
