"""API endpoints for Showfinder event discovery."""

import logging
import math
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from showfinder.config import configure_logging, get_settings
from showfinder.errors import (
    ConfigurationError,
    NotFoundError,
    StoreError,
    UpstreamError,
    ValidationError,
)
from showfinder.models import (
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
from showfinder.services import (
    FavoriteStore,
    SpotifyClient,
    TicketmasterClient,
    close_favorite_store,
    get_favorite_store,
    get_spotify_client,
    get_ticketmaster_client,
)

load_dotenv()

# Configure logging from settings (uses LOG_LEVEL env var)
configure_logging()
logger = logging.getLogger(__name__)

# Safe messages for store failures, keyed by HTTP method
STORE_ERROR_MESSAGES = {
    "GET": "Failed to load favorites",
    "POST": "Failed to add favorite",
    "DELETE": "Failed to remove favorite",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Warn about missing credentials on startup, close clients on shutdown."""
    missing = get_settings().missing_credentials()
    if missing:
        logger.warning(
            "Missing credentials: %s. Affected endpoints will fail until configured.",
            ", ".join(missing),
        )

    yield

    await get_ticketmaster_client().close()
    await get_spotify_client().close()
    await close_favorite_store()


app = FastAPI(title="Showfinder", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, str(exc))


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.debug("Rejected request to %s: %s", request.url.path, exc.errors())
    if request.url.path.startswith("/api/favorites"):
        return _error(400, "Invalid favorite payload")
    return _error(400, "Invalid request")


@app.exception_handler(NotFoundError)
async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, str(exc))


@app.exception_handler(ConfigurationError)
async def handle_configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error on %s: %s", request.url.path, exc)
    return _error(500, "Service is not configured")


@app.exception_handler(UpstreamError)
async def handle_upstream_error(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("Upstream error on %s: %s", request.url.path, exc)
    return _error(500, "Internal server error")


@app.exception_handler(StoreError)
async def handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    return _error(500, STORE_ERROR_MESSAGES.get(request.method, "Internal server error"))


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return _error(500, "Internal server error")


@app.get("/")
def root():
    """Root endpoint."""
    return {"status": "ok"}


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def _parse_number(value: str | None, cast: type, name: str):
    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number") from e


def _parse_distance(value: str) -> int:
    """Whole miles; fractional input is truncated."""
    number = _parse_number(value, float, "distance")
    if not math.isfinite(number):
        raise ValidationError("distance must be a number")
    return int(number)


@app.get("/api/events/search", response_model=list[Event])
async def search_events(
    keyword: str | None = None,
    category: str | None = None,
    lat: str | None = None,
    lng: str | None = None,
    distance: str | None = None,
    client: TicketmasterClient = Depends(get_ticketmaster_client),
):
    """Search events by keyword around a point."""
    keyword = (keyword or "").strip()
    if not keyword or not lat or not lng:
        raise ValidationError("Keyword, lat, and lng are required")

    params = SearchParams(
        keyword=keyword,
        category=category or "All",
        lat=_parse_number(lat, float, "lat"),
        lng=_parse_number(lng, float, "lng"),
        distance=_parse_distance(distance) if distance else 10,
    )
    return await client.search_events(params)


@app.get("/api/events/suggestions", response_model=SuggestionsResponse)
async def event_suggestions(
    keyword: str | None = None,
    client: TicketmasterClient = Depends(get_ticketmaster_client),
):
    """Autocomplete suggestions for a keyword."""
    keyword = (keyword or "").strip()
    if not keyword:
        raise ValidationError("Keyword is required")

    return SuggestionsResponse(suggestions=await client.get_suggestions(keyword))


@app.get("/api/events/spotify/token", response_model=SpotifyToken)
async def spotify_token(client: SpotifyClient = Depends(get_spotify_client)):
    """Hand out the cached Spotify access token."""
    return SpotifyToken(access_token=await client.get_access_token())


@app.get("/api/events/spotify/artist", response_model=SpotifyArtistResponse)
async def spotify_artist(
    name: str | None = None,
    client: SpotifyClient = Depends(get_spotify_client),
):
    """Look up an artist and their albums on Spotify."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Artist name is required")

    result = await client.get_artist(name)
    if result.artist is None:
        raise NotFoundError("Artist not found on Spotify")
    return result


# Declared after the fixed /api/events/* paths so they take precedence
@app.get("/api/events/{event_id}", response_model=EventDetail)
async def event_details(
    event_id: str,
    client: TicketmasterClient = Depends(get_ticketmaster_client),
):
    """Full details for one event."""
    event_id = event_id.strip()
    if not event_id:
        raise ValidationError("Event id is required")

    return await client.get_event_details(event_id)


@app.get("/api/favorites", response_model=list[FavoriteEvent])
async def list_favorites(store: FavoriteStore = Depends(get_favorite_store)):
    """All favorites, oldest first."""
    return await store.list_favorites()


@app.post("/api/favorites", response_model=FavoriteEvent)
async def add_favorite(
    payload: FavoriteEventPayload,
    response: Response,
    store: FavoriteStore = Depends(get_favorite_store),
):
    """Create a favorite (201) or update an existing one (200)."""
    result = await store.add_favorite(payload)
    response.status_code = 201 if result.created else 200
    return result.favorite


@app.delete("/api/favorites/{event_id}", response_model=RemoveFavoriteResponse)
async def remove_favorite(
    event_id: str,
    store: FavoriteStore = Depends(get_favorite_store),
):
    """Remove a favorite. Removing an absent id is not an error."""
    event_id = event_id.strip()
    if not event_id:
        raise ValidationError("Favorite id is required")

    return RemoveFavoriteResponse(removed=await store.remove_favorite(event_id))


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
