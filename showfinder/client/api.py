"""
HTTP client for a running Showfinder API.

Mirrors the routes in showfinder.index and turns error responses back into
Showfinder error kinds: 400 becomes ValidationError, 404 NotFoundError and
any other failure UpstreamError.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PayloadError

from showfinder.config import get_settings
from showfinder.errors import NotFoundError, UpstreamError, ValidationError
from showfinder.models import (
    AddFavoriteResult,
    Event,
    EventDetail,
    FavoriteEvent,
    FavoriteEventPayload,
    RemoveFavoriteResponse,
    SearchParams,
    SpotifyArtistResponse,
    SpotifyToken,
    SuggestionsResponse,
)

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"{response.status_code} {response.reason_phrase}"


class ShowfinderClient:
    """Async client for the Showfinder HTTP API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or get_settings().api_base_url).rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ShowfinderClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise UpstreamError(f"Showfinder API request failed: {e}") from e

        if response.is_success:
            return response

        message = _error_message(response)
        if response.status_code == 400:
            raise ValidationError(message)
        if response.status_code == 404:
            raise NotFoundError(message)
        raise UpstreamError(message, status_code=response.status_code)

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"Showfinder API returned invalid JSON: {e}") from e

    async def search_events(self, params: SearchParams) -> list[Event]:
        """Search events around a point."""
        response = await self._request(
            "GET",
            "/events/search",
            params={
                "keyword": params.keyword,
                "category": params.category,
                "lat": str(params.lat),
                "lng": str(params.lng),
                "distance": str(params.distance),
            },
        )
        data = self._json(response)
        if not isinstance(data, list):
            raise UpstreamError("Showfinder API returned a non-list search result")
        try:
            return [Event.model_validate(item) for item in data if item]
        except PayloadError as e:
            raise UpstreamError(f"Showfinder API returned malformed events: {e}") from e

    async def get_suggestions(self, keyword: str) -> list[str]:
        """Keyword suggestions from the backend."""
        response = await self._request(
            "GET", "/events/suggestions", params={"keyword": keyword}
        )
        try:
            return SuggestionsResponse.model_validate(self._json(response)).suggestions
        except PayloadError as e:
            raise UpstreamError(f"Showfinder API returned malformed suggestions: {e}") from e

    async def get_event_details(self, event_id: str) -> EventDetail:
        """Full details for one event. Raises NotFoundError for unknown ids."""
        response = await self._request("GET", f"/events/{quote(event_id, safe='')}")
        try:
            return EventDetail.model_validate(self._json(response))
        except PayloadError as e:
            raise UpstreamError(f"Showfinder API returned a malformed event: {e}") from e

    async def get_spotify_token(self) -> str:
        response = await self._request("GET", "/events/spotify/token")
        try:
            return SpotifyToken.model_validate(self._json(response)).access_token
        except PayloadError as e:
            raise UpstreamError(f"Showfinder API returned a malformed token: {e}") from e

    async def get_artist(self, name: str) -> SpotifyArtistResponse | None:
        """Artist lookup. Returns None when Spotify has no match."""
        try:
            response = await self._request(
                "GET", "/events/spotify/artist", params={"name": name}
            )
        except NotFoundError:
            logger.debug("No Spotify artist for %s", name)
            return None
        try:
            return SpotifyArtistResponse.model_validate(self._json(response))
        except PayloadError as e:
            raise UpstreamError(f"Showfinder API returned a malformed artist: {e}") from e

    async def list_favorites(self) -> list[FavoriteEvent]:
        response = await self._request("GET", "/favorites")
        data = self._json(response)
        try:
            return [FavoriteEvent.model_validate(item) for item in data or []]
        except PayloadError as e:
            raise UpstreamError(f"Showfinder API returned malformed favorites: {e}") from e

    async def add_favorite(self, payload: FavoriteEventPayload) -> AddFavoriteResult:
        """Create or update a favorite; `created` reflects the 201/200 status."""
        response = await self._request(
            "POST",
            "/favorites",
            json=payload.model_dump(by_alias=True, exclude_none=True),
        )
        try:
            favorite = FavoriteEvent.model_validate(self._json(response))
        except PayloadError as e:
            raise UpstreamError(f"Showfinder API returned a malformed favorite: {e}") from e
        return AddFavoriteResult(favorite=favorite, created=response.status_code == 201)

    async def remove_favorite(self, event_id: str) -> FavoriteEvent | None:
        """Remove a favorite. Returns the removed record, or None if absent."""
        response = await self._request("DELETE", f"/favorites/{quote(event_id, safe='')}")
        try:
            return RemoveFavoriteResponse.model_validate(self._json(response)).removed
        except PayloadError as e:
            raise UpstreamError(f"Showfinder API returned a malformed removal: {e}") from e
