"""
Live integration tests for the Ticketmaster and Spotify clients.

These tests hit real API endpoints and require valid credentials in the
environment. They are excluded from normal test runs via pytest markers.

## Running Integration Tests

### Prerequisites
```bash
export TICKETMASTER_API_KEY="your-key"
export SPOTIFY_CLIENT_ID="your-id"
export SPOTIFY_CLIENT_SECRET="your-secret"
```

### Run All Integration Tests
```bash
pytest -m integration showfinder/services/tests/test_live_sources.py -v
```

### Run Tests for One Source
```bash
pytest -m integration -k "Ticketmaster" showfinder/services/tests/test_live_sources.py -v
```

## Test Expectations

Tests pass if no exception occurs and return types match. Empty results are
acceptable (the APIs may have no data or be rate-limited).
"""

import os

import pytest

from showfinder.models import Event, EventDetail, SearchParams, SpotifyArtistResponse
from showfinder.services.spotify import ALBUM_DISPLAY_LIMIT, SpotifyClient
from showfinder.services.ticketmaster import TicketmasterClient


# ============================================================================
# Skip Conditions
# ============================================================================

def ticketmaster_key() -> str:
    """Key from TICKETMASTER_API_KEY, or its TM_API_KEY alias."""
    return os.getenv("TICKETMASTER_API_KEY") or os.getenv("TM_API_KEY") or ""


def skip_if_no_ticketmaster_key():
    """Skip test if neither TICKETMASTER_API_KEY nor TM_API_KEY is set."""
    if not ticketmaster_key():
        pytest.skip("TICKETMASTER_API_KEY or TM_API_KEY required for this test")


def skip_if_no_spotify_credentials():
    """Skip test if Spotify credentials are not set."""
    if not (os.getenv("SPOTIFY_CLIENT_ID") and os.getenv("SPOTIFY_CLIENT_SECRET")):
        pytest.skip("SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET required for this test")


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
async def ticketmaster_client():
    """Create TicketmasterClient with cleanup."""
    skip_if_no_ticketmaster_key()
    client = TicketmasterClient(api_key=ticketmaster_key())
    yield client
    await client.close()


@pytest.fixture
async def spotify_client():
    """Create SpotifyClient with cleanup."""
    skip_if_no_spotify_credentials()
    client = SpotifyClient(
        client_id=os.environ["SPOTIFY_CLIENT_ID"],
        client_secret=os.environ["SPOTIFY_CLIENT_SECRET"],
    )
    yield client
    await client.close()


# ============================================================================
# Ticketmaster Tests
# ============================================================================

@pytest.mark.integration
class TestTicketmasterLive:
    """Live integration tests for TicketmasterClient."""

    @pytest.mark.asyncio
    async def test_search_los_angeles(self, ticketmaster_client):
        """Search returns a list of Event models."""
        events = await ticketmaster_client.search_events(
            SearchParams(keyword="music", lat=34.0522, lng=-118.2437, distance=25)
        )

        assert isinstance(events, list)
        for event in events:
            assert isinstance(event, Event)
            assert event.id

    @pytest.mark.asyncio
    async def test_suggestions(self, ticketmaster_client):
        suggestions = await ticketmaster_client.get_suggestions("taylor")

        assert isinstance(suggestions, list)
        assert len(suggestions) <= 10

    @pytest.mark.asyncio
    async def test_detail_for_first_result(self, ticketmaster_client):
        events = await ticketmaster_client.search_events(
            SearchParams(keyword="concert", lat=40.7128, lng=-74.0060, distance=50)
        )
        if not events:
            pytest.skip("No events returned to look up")

        detail = await ticketmaster_client.get_event_details(events[0].id)
        assert isinstance(detail, EventDetail)
        assert detail.id == events[0].id


# ============================================================================
# Spotify Tests
# ============================================================================

@pytest.mark.integration
class TestSpotifyLive:
    """Live integration tests for SpotifyClient."""

    @pytest.mark.asyncio
    async def test_token_cached(self, spotify_client):
        first = await spotify_client.get_access_token()
        second = await spotify_client.get_access_token()

        assert first
        assert first == second

    @pytest.mark.asyncio
    async def test_artist_lookup(self, spotify_client):
        result = await spotify_client.get_artist("Taylor Swift")

        assert isinstance(result, SpotifyArtistResponse)
        assert result.artist is not None
        assert len(result.albums) <= ALBUM_DISPLAY_LIMIT
