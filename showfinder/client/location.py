"""
Location lookups used before a search.

- GeocodingClient: free-text location to coordinates (Google Geocoding API)
- IPInfoClient: "city, region" for the caller's IP address (IPinfo)

Both return None rather than raising when the lookup comes back empty or
the request fails, so the search flow can show a friendly message.
"""

import logging
import time

import httpx

from showfinder.config import get_settings
from showfinder.errors import ConfigurationError
from showfinder.models import Coordinates

logger = logging.getLogger(__name__)


class GeocodingClient:
    """Async client for the Google Geocoding API."""

    BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

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

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def geocode(self, address: str) -> Coordinates | None:
        """
        Resolve an address to coordinates.

        Returns:
            Coordinates of the first result, or None when nothing matched or
            the request failed

        Raises:
            ConfigurationError: If the API key is missing
        """
        if not self.api_key:
            raise ConfigurationError("Google Geocoding API key is missing")

        client = await self._get_client()
        start_time = time.perf_counter()
        try:
            response = await client.get(
                self.BASE_URL, params={"address": address, "key": self.api_key}
            )
            response.raise_for_status()
            results = response.json().get("results") or []
            if not results:
                logger.debug("📭 [Geocode] No results | address='%s'", address)
                return None
            location = results[0]["geometry"]["location"]
            coords = Coordinates(lat=location["lat"], lng=location["lng"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Error geocoding location '%s': %s", address, e)
            return None

        logger.debug(
            "✅ [Geocode] Resolved | address='%s' lat=%s lng=%s duration=%.2fs",
            address,
            coords.lat,
            coords.lng,
            time.perf_counter() - start_time,
        )
        return coords


class IPInfoClient:
    """Async client for IPinfo's "current IP" lookup."""

    BASE_URL = "https://ipinfo.io/json"

    def __init__(
        self,
        token: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def detect_location(self) -> str | None:
        """
        Return "city, region" for the current IP.

        None when either part is missing or the request failed.

        Raises:
            ConfigurationError: If the token is missing
        """
        if not self.token:
            raise ConfigurationError("IPinfo token is missing")

        client = await self._get_client()
        try:
            response = await client.get(self.BASE_URL, params={"token": self.token})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Error fetching location: %s", e)
            return None

        city = data.get("city") if isinstance(data, dict) else None
        region = data.get("region") if isinstance(data, dict) else None
        if not city or not region:
            return None
        return f"{city}, {region}"


def get_geocoding_client() -> GeocodingClient:
    """Build a geocoding client from settings."""
    settings = get_settings()
    return GeocodingClient(
        api_key=settings.google_geocoding_api_key,
        timeout=settings.http_timeout,
    )


def get_ipinfo_client() -> IPInfoClient:
    """Build an IPinfo client from settings."""
    settings = get_settings()
    return IPInfoClient(token=settings.ipinfo_token, timeout=settings.http_timeout)
