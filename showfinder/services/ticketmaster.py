"""
Ticketmaster Discovery API client.

Provides async event search, keyword suggestions and event detail lookups.

API Docs: https://developer.ticketmaster.com/products-and-docs/apis/discovery-api/v2/
"""

import logging
import time
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PayloadError

from showfinder.config import get_settings
from showfinder.errors import ConfigurationError, NotFoundError, UpstreamError
from showfinder.models import Event, EventDetail, SearchParams
from showfinder.models.upstream import (
    TMEventDetailResponse,
    TMEventsResponse,
    TMSuggestResponse,
)
from showfinder.services.normalize import merge_suggestions, to_event_detail, to_events

logger = logging.getLogger(__name__)

# Category value meaning "no classification filter"
ALL_CATEGORIES = "All"

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class TicketmasterClient:
    """Async client for the Ticketmaster Discovery API."""

    BASE_URL = "https://app.ticketmaster.com/discovery/v2"

    def __init__(
        self,
        api_key: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def is_configured(self) -> bool:
        """Check if the API key is present."""
        return bool(self.api_key)

    def _require_key(self) -> None:
        if not self.api_key:
            raise ConfigurationError("Ticketmaster API key is missing")

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.BASE_URL,
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

    async def _get(self, path: str, params: dict[str, Any]) -> httpx.Response:
        client = await self._get_client()
        try:
            return await client.get(path, params={"apikey": self.api_key, **params})
        except httpx.RequestError as e:
            raise UpstreamError(f"Ticketmaster request failed: {e}") from e

    @staticmethod
    def _parse(response: httpx.Response, model: type[PayloadT], label: str) -> PayloadT:
        try:
            return model.model_validate(response.json())
        except (PayloadError, ValueError) as e:
            raise UpstreamError(f"Ticketmaster {label} response was malformed: {e}") from e

    @staticmethod
    def _raise_for_status(response: httpx.Response, label: str) -> None:
        if not response.is_success:
            raise UpstreamError(
                f"Ticketmaster {label} error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

    async def search_events(self, params: SearchParams) -> list[Event]:
        """
        Search events around a point.

        Args:
            params: Keyword, optional category, coordinates and radius in miles

        Returns:
            List of Event objects; empty when the provider has no matches

        Raises:
            ConfigurationError: If the API key is missing
            UpstreamError: If the provider responds with a non-2xx status
        """
        self._require_key()

        query: dict[str, Any] = {
            "keyword": params.keyword,
            "radius": str(params.distance),
            "unit": "miles",
            "latlong": f"{params.lat},{params.lng}",
        }
        if params.category and params.category != ALL_CATEGORIES:
            query["classificationName"] = params.category

        logger.debug(
            "📤 [Ticketmaster] Outbound Query | keyword='%s' latlong=%s radius=%s category=%s",
            params.keyword,
            query["latlong"],
            query["radius"],
            query.get("classificationName", ALL_CATEGORIES),
        )
        start_time = time.perf_counter()

        response = await self._get("/events.json", query)
        self._raise_for_status(response, "events API")
        data = self._parse(response, TMEventsResponse, "events")

        if data.embedded is None or data.embedded.events is None:
            logger.debug(
                "📭 [Ticketmaster] No events found | duration=%.2fs",
                time.perf_counter() - start_time,
            )
            return []

        events = to_events(data.embedded.events)
        logger.debug(
            "✅ [Ticketmaster] Search complete | events=%d duration=%.2fs",
            len(events),
            time.perf_counter() - start_time,
        )
        return events

    async def get_suggestions(self, keyword: str) -> list[str]:
        """
        Keyword suggestions built from attraction, venue and event names.

        Raises:
            ConfigurationError: If the API key is missing
            UpstreamError: If the provider responds with a non-2xx status
        """
        self._require_key()

        response = await self._get("/suggest", {"keyword": keyword})
        self._raise_for_status(response, "suggest API")
        data = self._parse(response, TMSuggestResponse, "suggest")

        suggestions = merge_suggestions(data)
        logger.debug(
            "✅ [Ticketmaster] Suggestions | keyword='%s' count=%d",
            keyword,
            len(suggestions),
        )
        return suggestions

    async def get_event_details(self, event_id: str) -> EventDetail:
        """
        Fetch full details for one event.

        Raises:
            ConfigurationError: If the API key is missing
            NotFoundError: If the provider has no such event
            UpstreamError: If the provider responds with another non-2xx status
        """
        self._require_key()

        response = await self._get(f"/events/{quote(event_id, safe='')}", {})
        if response.status_code == 404:
            raise NotFoundError(f"Event not found: {event_id}")
        self._raise_for_status(response, "event detail")

        data = self._parse(response, TMEventDetailResponse, "event detail")
        if not data.id:
            raise NotFoundError(f"Event not found: {event_id}")

        return to_event_detail(data)


# Singleton instance
_client: TicketmasterClient | None = None


def get_ticketmaster_client() -> TicketmasterClient:
    """Get the singleton Ticketmaster client."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = TicketmasterClient(
            api_key=settings.ticketmaster_api_key,
            timeout=settings.http_timeout,
        )
    return _client
