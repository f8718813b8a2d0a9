"""Tests for the Ticketmaster Discovery client."""

import httpx
import pytest

from showfinder.errors import ConfigurationError, NotFoundError, UpstreamError
from showfinder.models import SearchParams
from showfinder.services.ticketmaster import TicketmasterClient


def recording_transport(payload=None, status_code=200):
    """MockTransport returning a fixed response; requests land in `.requests`."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json=payload if payload is not None else {})

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport


@pytest.fixture
def params():
    return SearchParams(keyword="jazz", lat=34.05, lng=-118.24)


class TestSearchEvents:
    """Tests for /events.json searches."""

    @pytest.mark.asyncio
    async def test_missing_key_raises_before_request(self, params):
        """No API key means ConfigurationError and no network call."""
        transport = recording_transport()
        client = TicketmasterClient(api_key="", transport=transport)

        with pytest.raises(ConfigurationError):
            await client.search_events(params)
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_no_embedded_events_returns_empty(self, params):
        client = TicketmasterClient(
            api_key="key", transport=recording_transport({"page": {"totalElements": 0}})
        )
        assert await client.search_events(params) == []

    @pytest.mark.asyncio
    async def test_query_parameters(self, params):
        transport = recording_transport({"_embedded": {"events": [{"id": "E1", "name": "Jazz"}]}})
        client = TicketmasterClient(api_key="key", transport=transport)

        events = await client.search_events(params)

        assert [event.id for event in events] == ["E1"]
        request = transport.requests[0]
        assert request.url.path == "/discovery/v2/events.json"
        assert request.url.params["apikey"] == "key"
        assert request.url.params["keyword"] == "jazz"
        assert request.url.params["radius"] == "10"
        assert request.url.params["unit"] == "miles"
        assert request.url.params["latlong"] == "34.05,-118.24"
        assert "classificationName" not in request.url.params

    @pytest.mark.asyncio
    async def test_category_filter(self):
        transport = recording_transport({})
        client = TicketmasterClient(api_key="key", transport=transport)

        await client.search_events(
            SearchParams(keyword="x", category="Sports", lat=1, lng=2, distance=25)
        )

        request = transport.requests[0]
        assert request.url.params["classificationName"] == "Sports"
        assert request.url.params["radius"] == "25"

    @pytest.mark.asyncio
    async def test_non_success_raises_with_status(self, params):
        client = TicketmasterClient(api_key="key", transport=recording_transport({}, 401))

        with pytest.raises(UpstreamError, match="401") as exc_info:
            await client.search_events(params)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_malformed_payload_raises(self, params):
        client = TicketmasterClient(
            api_key="key", transport=recording_transport({"_embedded": {"events": "nope"}})
        )

        with pytest.raises(UpstreamError, match="malformed"):
            await client.search_events(params)


class TestSuggestions:
    """Tests for /suggest."""

    @pytest.mark.asyncio
    async def test_missing_key_raises(self):
        transport = recording_transport()
        with pytest.raises(ConfigurationError):
            await TicketmasterClient(transport=transport).get_suggestions("tay")
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_merged_suggestions(self):
        transport = recording_transport(
            {
                "_embedded": {
                    "attractions": [{"name": "Taylor Swift"}],
                    "venues": [{"name": "Taylor Hall"}],
                }
            }
        )
        client = TicketmasterClient(api_key="key", transport=transport)

        assert await client.get_suggestions("tay") == ["Taylor Swift", "Taylor Hall"]
        assert transport.requests[0].url.path == "/discovery/v2/suggest"
        assert transport.requests[0].url.params["keyword"] == "tay"


class TestEventDetails:
    """Tests for /events/{id}."""

    @pytest.mark.asyncio
    async def test_missing_key_raises(self):
        with pytest.raises(ConfigurationError):
            await TicketmasterClient(transport=recording_transport()).get_event_details("E1")

    @pytest.mark.asyncio
    async def test_detail(self):
        transport = recording_transport(
            {
                "id": "E1",
                "name": "Eras Tour",
                "classifications": [{"segment": {"name": "Music"}, "genre": {"name": "Pop"}}],
            }
        )
        client = TicketmasterClient(api_key="key", transport=transport)

        detail = await client.get_event_details("E1")

        assert detail.id == "E1"
        assert detail.genres == ["Music", "Pop"]
        assert transport.requests[0].url.path == "/discovery/v2/events/E1"

    @pytest.mark.asyncio
    async def test_body_without_id_is_not_found(self):
        client = TicketmasterClient(api_key="key", transport=recording_transport({"name": "x"}))

        with pytest.raises(NotFoundError):
            await client.get_event_details("E1")

    @pytest.mark.asyncio
    async def test_upstream_404_is_not_found(self):
        client = TicketmasterClient(
            api_key="key", transport=recording_transport({"fault": {}}, 404)
        )

        with pytest.raises(NotFoundError):
            await client.get_event_details("missing")

    @pytest.mark.asyncio
    async def test_upstream_500_is_upstream_error(self):
        client = TicketmasterClient(api_key="key", transport=recording_transport({}, 500))

        with pytest.raises(UpstreamError):
            await client.get_event_details("E1")

    @pytest.mark.asyncio
    async def test_close_resets_client(self):
        client = TicketmasterClient(api_key="key", transport=recording_transport({"id": "E1"}))
        await client.get_event_details("E1")
        assert client._client is not None

        await client.close()
        assert client._client is None
