"""
Client-side favorites cache.

Keeps an ordered in-memory copy of the favorites list in step with the
server. Local state changes only after the server call succeeds; a remove
hands back the server's copy of the removed record so an undo can restore
the exact values that were stored.

Each event id moves through IDLE -> PENDING -> COMMITTED | ROLLED_BACK
while a toggle or an undo runs. A second toggle for an id that is still
PENDING is skipped instead of overlapping the first, and an undo for a
PENDING id is refused.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol

from showfinder.errors import ShowfinderError
from showfinder.models import (
    AddFavoriteResult,
    Event,
    EventDetail,
    FavoriteEvent,
    FavoriteEventPayload,
)

logger = logging.getLogger(__name__)

DEFAULT_GENRE = "Miscellaneous"


class FavoritesBackend(Protocol):
    """The subset of ShowfinderClient the cache talks to."""

    async def list_favorites(self) -> list[FavoriteEvent]: ...

    async def add_favorite(self, payload: FavoriteEventPayload) -> AddFavoriteResult: ...

    async def remove_favorite(self, event_id: str) -> FavoriteEvent | None: ...


class FavoriteStatus(str, Enum):
    """Per-id state of a favorite toggle."""

    IDLE = "idle"
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class ToggleAction(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    SKIPPED = "skipped"
    FAILED = "failed"


def _created_at_key(favorite: FavoriteEvent) -> tuple[int, float]:
    # Unparseable timestamps sort last
    try:
        return (0, datetime.fromisoformat(favorite.created_at.replace("Z", "+00:00")).timestamp())
    except ValueError:
        return (1, 0.0)


def sort_favorites(items: list[FavoriteEvent]) -> list[FavoriteEvent]:
    """Order by createdAt ascending; stable for equal timestamps."""
    return sorted(items, key=_created_at_key)


def favorite_payload_from_detail(detail: EventDetail) -> FavoriteEventPayload:
    """Build the favorite card for an event shown in the detail view."""
    return FavoriteEventPayload(
        id=detail.id,
        name=detail.name,
        date=detail.date,
        time=detail.time,
        venue=detail.venue.name if detail.venue else "",
        genre=detail.genres[0] if detail.genres else DEFAULT_GENRE,
        image=(detail.venue.image if detail.venue else None) or "",
        url=detail.url,
    )


def _as_payload(item: Event | FavoriteEventPayload) -> FavoriteEventPayload:
    if isinstance(item, FavoriteEventPayload):
        return item
    return FavoriteEventPayload.from_event(item)


@dataclass
class ToggleOutcome:
    """Result of FavoritesCache.toggle.

    For a removal, `removed` is the record the server deleted (None if it
    reported nothing) and `payload` the values the caller toggled with.
    """

    event_id: str
    action: ToggleAction
    favorite: FavoriteEvent | None = None
    removed: FavoriteEvent | None = None
    payload: FavoriteEventPayload | None = None
    error: Exception | None = None
    cache: "FavoritesCache | None" = field(default=None, repr=False)

    @property
    def can_undo(self) -> bool:
        return self.action == ToggleAction.REMOVED and self.cache is not None

    async def undo(self) -> FavoriteEvent:
        """Re-add a removed favorite with the values captured at removal time."""
        if not self.can_undo:
            raise ShowfinderError(f"Nothing to undo for {self.event_id} ({self.action.value})")

        source = self.removed if self.removed is not None else self.payload
        return await self.cache.restore(source)


class FavoritesCache:
    """Ordered favorites list mirroring the server."""

    def __init__(self, backend: FavoritesBackend):
        self.backend = backend
        self._favorites: list[FavoriteEvent] = []
        self._pending: set[str] = set()
        self._status: dict[str, FavoriteStatus] = {}
        self.loading = False

    @property
    def favorites(self) -> list[FavoriteEvent]:
        return list(self._favorites)

    async def refresh(self) -> None:
        """Reload the list from the server.

        A failed reload keeps the current list.
        """
        self.loading = True
        try:
            self._favorites = sort_favorites(await self.backend.list_favorites())
        except ShowfinderError as e:
            logger.error("Failed to fetch favorites: %s", e)
        finally:
            self.loading = False

    def is_favorite(self, event_id: str | None) -> bool:
        return any(item.id == event_id for item in self._favorites)

    def get_favorite(self, event_id: str | None) -> FavoriteEvent | None:
        return next((item for item in self._favorites if item.id == event_id), None)

    def is_pending(self, event_id: str) -> bool:
        return event_id in self._pending

    def status(self, event_id: str) -> FavoriteStatus:
        return self._status.get(event_id, FavoriteStatus.IDLE)

    async def add_favorite(self, item: Event | FavoriteEventPayload) -> FavoriteEvent:
        """Save on the server, then replace any local entry with the same id."""
        result = await self.backend.add_favorite(_as_payload(item))
        favorite = result.favorite
        others = [existing for existing in self._favorites if existing.id != favorite.id]
        self._favorites = sort_favorites([*others, favorite])
        return favorite

    async def remove_favorite(self, event_id: str) -> FavoriteEvent | None:
        """Remove on the server, then drop the id locally whatever it reported."""
        removed = await self.backend.remove_favorite(event_id)
        self._favorites = [item for item in self._favorites if item.id != event_id]
        return removed

    def _claim(self, event_id: str) -> bool:
        """Mark the id PENDING. False if another change for it is in flight."""
        if event_id in self._pending:
            return False
        self._pending.add(event_id)
        self._status[event_id] = FavoriteStatus.PENDING
        return True

    def _release(self, event_id: str, status: FavoriteStatus) -> None:
        self._status[event_id] = status
        self._pending.discard(event_id)

    async def restore(self, item: Event | FavoriteEventPayload) -> FavoriteEvent:
        """Re-add a favorite under the same per-id gate as toggle.

        Raises:
            ShowfinderError: If a change for the id is already in flight,
                or the server call fails
        """
        payload = _as_payload(item)
        event_id = payload.id or ""

        if not self._claim(event_id):
            raise ShowfinderError(f"Favorite {event_id} is already being updated")

        status = FavoriteStatus.ROLLED_BACK
        try:
            favorite = await self.add_favorite(payload)
            status = FavoriteStatus.COMMITTED
            return favorite
        finally:
            self._release(event_id, status)

    async def toggle(self, event: Event | FavoriteEventPayload) -> ToggleOutcome:
        """Add the event if it is not a favorite, otherwise remove it."""
        payload = _as_payload(event)
        event_id = payload.id or ""

        if not self._claim(event_id):
            logger.debug("Toggle for %s skipped, one is already in flight", event_id)
            return ToggleOutcome(event_id=event_id, action=ToggleAction.SKIPPED)

        status = FavoriteStatus.ROLLED_BACK
        try:
            if self.is_favorite(event_id):
                removed = await self.remove_favorite(event_id)
                outcome = ToggleOutcome(
                    event_id=event_id,
                    action=ToggleAction.REMOVED,
                    removed=removed,
                    payload=payload,
                    cache=self,
                )
            else:
                favorite = await self.add_favorite(payload)
                outcome = ToggleOutcome(
                    event_id=event_id,
                    action=ToggleAction.ADDED,
                    favorite=favorite,
                    payload=payload,
                )
            status = FavoriteStatus.COMMITTED
            return outcome
        except ShowfinderError as e:
            logger.error("Error updating favorites for %s: %s", event_id, e)
            return ToggleOutcome(
                event_id=event_id,
                action=ToggleAction.FAILED,
                payload=payload,
                error=e,
            )
        finally:
            self._release(event_id, status)
