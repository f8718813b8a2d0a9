"""
Normalization of Ticketmaster and Spotify payloads into Showfinder models.

Pure functions with no I/O. Missing optional data never raises: absent
strings become "" on required fields and None on optional ones.
"""

from collections.abc import Iterable
from typing import Protocol

from showfinder.models import (
    ArtistInfo,
    Event,
    EventDetail,
    PriceRange,
    SpotifyAlbumInfo,
    SpotifyArtistInfo,
    VenueInfo,
    VenueLocation,
)
from showfinder.models.upstream import (
    SpotifyAlbumPayload,
    SpotifyArtistPayload,
    TMAttraction,
    TMClassification,
    TMEvent,
    TMEventDetailResponse,
    TMNamed,
    TMSuggestResponse,
    TMVenue,
)

MAX_SUGGESTIONS = 10


class _HasUrl(Protocol):
    url: str | None


def _first(items: list | None):
    """First element of an optional list, or None."""
    if not items:
        return None
    return items[0]


def _name(value: TMNamed | None) -> str | None:
    return value.name if value else None


def first_image_url(images: Iterable[_HasUrl | None] | None) -> str | None:
    """URL of the first image that actually has one."""
    for image in images or []:
        if image is not None and image.url:
            return image.url
    return None


def to_event(raw: TMEvent) -> Event:
    """Map one search result to an Event."""
    start = raw.dates.start if raw.dates else None
    venue = _first(raw.embedded.venues) if raw.embedded else None
    classification = _first(raw.classifications)
    image = _first(raw.images)

    return Event(
        id=raw.id or "",
        name=raw.name or "",
        date=(start.local_date if start else None) or "",
        time=(start.local_time if start else None) or "",
        venue=(venue.name if venue else None) or "",
        genre=(_name(classification.segment) if classification else None) or "",
        image=(image.url if image else None) or "",
        url=raw.url or "",
    )


def to_events(raw_events: Iterable[TMEvent | None]) -> list[Event]:
    """Map a list of search results, skipping null entries."""
    return [to_event(raw) for raw in raw_events if raw is not None]


def extract_genres(classifications: list[TMClassification | None] | None) -> list[str]:
    """Ordered, de-duplicated genre names of the primary classification.

    Levels are read most general first: segment, genre, subGenre, type,
    subType. Duplicates are dropped by exact string match.
    """
    primary = _first(classifications)
    if primary is None:
        return []

    ordered = [
        _name(primary.segment),
        _name(primary.genre),
        _name(primary.sub_genre),
        _name(primary.type),
        _name(primary.sub_type),
    ]
    return list(dict.fromkeys(name for name in ordered if name))


def compose_address(venue: TMVenue) -> str:
    """Join the non-empty address parts with ', '."""
    parts = [
        venue.address.line1 if venue.address else None,
        _name(venue.city),
        _name(venue.state),
        venue.postal_code,
        _name(venue.country),
    ]
    return ", ".join(part for part in parts if part)


def extract_venue(venues: list[TMVenue | None] | None) -> VenueInfo | None:
    """Structured info for the first venue, or None when there is none."""
    if not venues:
        return None

    venue = venues[0] or TMVenue()
    general = venue.general_info

    location = None
    if venue.location is not None:
        location = VenueLocation(
            latitude=venue.location.latitude,
            longitude=venue.location.longitude,
        )

    return VenueInfo(
        name=venue.name or "",
        address=compose_address(venue),
        city=_name(venue.city) or "",
        state=_name(venue.state) or "",
        postal_code=venue.postal_code or "",
        country=_name(venue.country) or "",
        url=venue.url,
        location=location,
        image=first_image_url(venue.images),
        general_rule=general.general_rule if general else None,
        child_rule=general.child_rule if general else None,
        parking_detail=general.parking_detail if general else None,
    )


def _first_link(links) -> str | None:
    link = _first(links)
    return link.url if link else None


def extract_artists(attractions: list[TMAttraction | None] | None) -> list[ArtistInfo]:
    """Performers with a name; nameless entries are dropped."""
    artists = []
    for attraction in attractions or []:
        if attraction is None or not attraction.name:
            continue
        links = attraction.external_links
        artists.append(
            ArtistInfo(
                name=attraction.name,
                url=attraction.url,
                twitter=_first_link(links.twitter) if links else None,
                facebook=_first_link(links.facebook) if links else None,
                image=first_image_url(attraction.images),
            )
        )
    return artists


def to_event_detail(raw: TMEventDetailResponse) -> EventDetail:
    """Map an event detail payload. Callers must check `raw.id` first."""
    start = raw.dates.start if raw.dates else None
    status = raw.dates.status if raw.dates else None
    embedded = raw.embedded

    return EventDetail(
        id=raw.id or "",
        name=raw.name or "",
        url=raw.url or "",
        date=(start.local_date if start else None) or "",
        time=(start.local_time if start else None) or "",
        status=(status.code if status else None) or "",
        venue=extract_venue(embedded.venues if embedded else None),
        genres=extract_genres(raw.classifications),
        artists=extract_artists(embedded.attractions if embedded else None),
        price_ranges=[
            PriceRange(**price.model_dump())
            for price in raw.price_ranges or []
            if price is not None
        ],
        seatmap_url=raw.seatmap.static_url if raw.seatmap else None,
    )


def merge_suggestions(raw: TMSuggestResponse, limit: int = MAX_SUGGESTIONS) -> list[str]:
    """Attraction, venue and event names as one ordered set.

    Names are trimmed and de-duplicated by exact string; attractions come
    first, then venues, then events.
    """
    embedded = raw.embedded
    if embedded is None:
        return []

    suggestions: dict[str, None] = {}
    for group in (embedded.attractions, embedded.venues, embedded.events):
        for item in group or []:
            name = (item.name if item else None) or ""
            if name.strip():
                suggestions.setdefault(name.strip(), None)

    return list(suggestions)[:limit]


def to_spotify_artist(raw: SpotifyArtistPayload) -> SpotifyArtistInfo:
    """Map a Spotify artist search hit. Callers must check `raw.id` first."""
    image = _first(raw.images)
    return SpotifyArtistInfo(
        id=raw.id or "",
        name=raw.name or "",
        followers=(raw.followers.total if raw.followers else None) or 0,
        popularity=raw.popularity or 0,
        genres=raw.genres or [],
        spotify_url=raw.external_urls.spotify if raw.external_urls else None,
        image=image.url if image else None,
    )


def normalize_albums(items: Iterable[SpotifyAlbumPayload | None] | None) -> list[SpotifyAlbumInfo]:
    """De-duplicate albums by lower-cased name, first occurrence wins.

    Source order is kept. The result is not capped here.
    """
    seen: dict[str, SpotifyAlbumInfo] = {}
    for album in items or []:
        if album is None or not album.name:
            continue
        key = album.name.lower()
        if key in seen:
            continue
        cover = _first(album.images)
        seen[key] = SpotifyAlbumInfo(
            id=album.id or "",
            name=album.name,
            release_date=album.release_date,
            total_tracks=album.total_tracks,
            spotify_url=album.external_urls.spotify if album.external_urls else None,
            image=cover.url if cover else None,
        )
    return list(seen.values())
