"""Favorite event models."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from showfinder.models.base import CamelModel
from showfinder.models.events import Event


def utc_timestamp(value: datetime | None = None) -> str:
    """Format a timestamp as ISO-8601 UTC with milliseconds and a Z suffix."""
    if value is None:
        value = datetime.now(UTC)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FavoriteEventPayload(CamelModel):
    """Body of POST /favorites. `id` and `name` are required by the store."""

    id: str | None = None
    name: str | None = None
    date: str | None = None
    time: str | None = None
    venue: str | None = None
    genre: str | None = None
    image: str | None = None
    url: str | None = None

    @classmethod
    def from_event(cls, event: Event) -> "FavoriteEventPayload":
        """Build a payload carrying an event's descriptive fields."""
        return cls(**event.model_dump(include=set(Event.model_fields)))


class FavoriteEvent(Event):
    """A persisted favorite. `created_at` is set once and never changes."""

    created_at: str = Field(description="ISO-8601 UTC timestamp")


class AddFavoriteResult(BaseModel):
    """Outcome of an add: the stored record and whether it was new."""

    favorite: FavoriteEvent
    created: bool


class RemoveFavoriteResponse(CamelModel):
    """Body of DELETE /favorites/{id}."""

    removed: FavoriteEvent | None = None
