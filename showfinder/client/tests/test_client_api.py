"""Tests for ShowfinderClient and the location clients."""

import json

import httpx
import pytest

from showfinder.client.api import ShowfinderClient
from showfinder.client.location import GeocodingClient, IPInfoClient
from showfinder.errors import ConfigurationError, NotFoundError, UpstreamError, ValidationError
from showfinder.models import FavoriteEventPayload, SearchParams

BASE_URL = "http://api.test/api"

FAVORITE = {
    "id": "E1",
    "name": "Jazz Night",
    "date": "",
    "time": "",
    "venue": "",
    "genre": "",
    "image": "",
    "url": "",
    "createdAt": "2025-01-01T00:00:00.000Z",
}


def make_client(handler) -> ShowfinderClient:
    return ShowfinderClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


class TestErrorMapping:
    """Tests for status code to error kind mapping."""

    @pytest.mark.asyncio
    async def test_400_is_validation_error(self):
        client = make_client(lambda request: httpx.Response(400, json={"error": "Keyword is required"}))

        with pytest.raises(ValidationError, match="Keyword is required"):
            await client.get_suggestions("")

    @pytest.mark.asyncio
    async def test_404_is_not_found(self):
        client = make_client(lambda request: httpx.Response(404, json={"error": "Event not found: x"}))

        with pytest.raises(NotFoundError):
            await client.get_event_details("x")

    @pytest.mark.asyncio
    async def test_500_is_upstream_error(self):
        client = make_client(lambda request: httpx.Response(500, json={"error": "Internal server error"}))

        with pytest.raises(UpstreamError) as exc_info:
            await client.list_favorites()
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_connection_error_is_upstream_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamError):
            await make_client(handler).list_favorites()


class TestEvents:
    """Tests for event routes."""

    @pytest.mark.asyncio
    async def test_search_sends_params(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[{"id": "E1", "name": "Jazz"}, None])

        events = await make_client(handler).search_events(
            SearchParams(keyword="jazz", lat=1.5, lng=-2.5, distance=15)
        )

        assert [event.id for event in events] == ["E1"]
        assert seen[0].url.path == "/api/events/search"
        assert seen[0].url.params["lat"] == "1.5"
        assert seen[0].url.params["distance"] == "15"
        assert seen[0].url.params["category"] == "All"

    @pytest.mark.asyncio
    async def test_suggestions(self):
        client = make_client(lambda request: httpx.Response(200, json={"suggestions": ["A", "B"]}))
        assert await client.get_suggestions("a") == ["A", "B"]

    @pytest.mark.asyncio
    async def test_event_id_is_escaped(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": "a/b"})

        detail = await make_client(handler).get_event_details("a/b")

        assert detail.id == "a/b"
        assert seen[0].url.raw_path == b"/api/events/a%2Fb"

    @pytest.mark.asyncio
    async def test_artist_404_returns_none(self):
        client = make_client(lambda request: httpx.Response(404, json={"error": "Artist not found on Spotify"}))
        assert await client.get_artist("Nobody") is None

    @pytest.mark.asyncio
    async def test_spotify_token(self):
        client = make_client(lambda request: httpx.Response(200, json={"access_token": "tok"}))
        assert await client.get_spotify_token() == "tok"


class TestFavorites:
    """Tests for favorites routes."""

    @pytest.mark.asyncio
    async def test_add_created_from_status(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json=FAVORITE)

        result = await make_client(handler).add_favorite(
            FavoriteEventPayload(id="E1", name="Jazz Night")
        )

        assert result.created is True
        assert result.favorite.created_at == FAVORITE["createdAt"]
        assert bodies[0] == {"id": "E1", "name": "Jazz Night"}

    @pytest.mark.asyncio
    async def test_add_updated_from_status(self):
        client = make_client(lambda request: httpx.Response(200, json=FAVORITE))
        result = await client.add_favorite(FavoriteEventPayload(id="E1", name="Jazz Night"))
        assert result.created is False

    @pytest.mark.asyncio
    async def test_remove(self):
        client = make_client(lambda request: httpx.Response(200, json={"removed": FAVORITE}))
        removed = await client.remove_favorite("E1")
        assert removed.id == "E1"

    @pytest.mark.asyncio
    async def test_remove_missing(self):
        client = make_client(lambda request: httpx.Response(200, json={"removed": None}))
        assert await client.remove_favorite("E1") is None


class TestGeocodingClient:
    """Tests for Google geocoding."""

    @pytest.mark.asyncio
    async def test_missing_key(self):
        with pytest.raises(ConfigurationError):
            await GeocodingClient().geocode("Austin")

    @pytest.mark.asyncio
    async def test_first_result_location(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "results": [
                        {"geometry": {"location": {"lat": 30.27, "lng": -97.74}}},
                        {"geometry": {"location": {"lat": 0, "lng": 0}}},
                    ],
                    "status": "OK",
                },
            )

        geocoder = GeocodingClient(api_key="gk", transport=httpx.MockTransport(handler))
        coords = await geocoder.geocode("Austin, TX")

        assert (coords.lat, coords.lng) == (30.27, -97.74)
        assert seen[0].url.params["address"] == "Austin, TX"
        assert seen[0].url.params["key"] == "gk"

    @pytest.mark.asyncio
    async def test_no_results(self):
        geocoder = GeocodingClient(
            api_key="gk",
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"results": [], "status": "ZERO_RESULTS"})
            ),
        )
        assert await geocoder.geocode("Nowhere") is None

    @pytest.mark.asyncio
    async def test_request_failure_returns_none(self):
        geocoder = GeocodingClient(
            api_key="gk", transport=httpx.MockTransport(lambda request: httpx.Response(500))
        )
        assert await geocoder.geocode("Austin") is None


class TestIPInfoClient:
    """Tests for IPinfo lookups."""

    @pytest.mark.asyncio
    async def test_missing_token(self):
        with pytest.raises(ConfigurationError):
            await IPInfoClient().detect_location()

    @pytest.mark.asyncio
    async def test_city_and_region(self):
        client = IPInfoClient(
            token="t",
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"city": "Los Angeles", "region": "California"})
            ),
        )
        assert await client.detect_location() == "Los Angeles, California"

    @pytest.mark.asyncio
    async def test_partial_location_is_none(self):
        client = IPInfoClient(
            token="t",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"city": "Austin"})),
        )
        assert await client.detect_location() is None
