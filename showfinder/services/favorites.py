"""
Favorites store.

One record per external event id. Adding an id that already exists updates
its descriptive fields in place and keeps `created_at`; removing is
idempotent. Records are listed oldest first.

Backends:
- SQLiteFavoriteStore: local file (default, data/favorites.db)
- TursoFavoriteStore: libsql:// URL (see turso_favorites.py)
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from starlette.concurrency import run_in_threadpool

from showfinder.config import get_settings
from showfinder.errors import StoreError, ValidationError
from showfinder.models import (
    AddFavoriteResult,
    FavoriteEvent,
    FavoriteEventPayload,
    utc_timestamp,
)

logger = logging.getLogger(__name__)

# Descriptive fields overwritten when an existing favorite is re-added
DESCRIPTIVE_FIELDS = ("name", "date", "time", "venue", "genre", "image", "url")

CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS favorites (
        event_id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        date TEXT DEFAULT '',
        time TEXT DEFAULT '',
        venue TEXT DEFAULT '',
        genre TEXT DEFAULT '',
        image TEXT DEFAULT '',
        url TEXT DEFAULT '',
        created_at TEXT NOT NULL
    )
"""

CREATE_INDEX_SQL = """
    CREATE INDEX IF NOT EXISTS idx_favorites_created_at ON favorites(created_at)
"""

SELECT_COLUMNS = "event_id, name, date, time, venue, genre, image, url, created_at"

# Concurrent adds for one id race on the primary key. The insert claims the
# id atomically; whoever loses it falls through to the update.
INSERT_IF_ABSENT_SQL = (
    f"INSERT INTO favorites ({SELECT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?) "
    "ON CONFLICT(event_id) DO NOTHING"
)

UPDATE_FIELDS_SQL = (
    "UPDATE favorites SET name = ?, date = ?, time = ?, venue = ?, "
    "genre = ?, image = ?, url = ? WHERE event_id = ?"
)


def validate_payload(payload: FavoriteEventPayload) -> dict[str, str]:
    """Check required fields and fill defaults for the rest.

    Returns:
        Column values keyed by field name, plus `event_id`

    Raises:
        ValidationError: If id or name is missing or blank
    """
    event_id = (payload.id or "").strip()
    name = (payload.name or "").strip()
    if not event_id or not name:
        raise ValidationError("Invalid favorite payload")

    values = {field: getattr(payload, field) or "" for field in DESCRIPTIVE_FIELDS}
    values["name"] = name
    values["event_id"] = event_id
    return values


def row_to_favorite(row: Any) -> FavoriteEvent:
    """Convert a (event_id, name, ..., created_at) row to FavoriteEvent."""
    event_id, name, date, time, venue, genre, image, url, created_at = tuple(row)
    return FavoriteEvent(
        id=event_id,
        name=name or "",
        date=date or "",
        time=time or "",
        venue=venue or "",
        genre=genre or "",
        image=image or "",
        url=url or "",
        created_at=created_at or utc_timestamp(),
    )


class FavoriteStore(ABC):
    """Interface for favorite persistence operations."""

    @abstractmethod
    async def list_favorites(self) -> list[FavoriteEvent]:
        """Return all favorites ordered by created_at ascending."""
        ...

    @abstractmethod
    async def add_favorite(self, payload: FavoriteEventPayload) -> AddFavoriteResult:
        """Create a favorite, or update the existing one with the same id."""
        ...

    @abstractmethod
    async def remove_favorite(self, event_id: str) -> FavoriteEvent | None:
        """Delete by id. Returns the removed record, or None if absent."""
        ...

    async def close(self) -> None:
        """Release backend resources."""


class SQLiteFavoriteStore(FavoriteStore):
    """SQLite-backed favorites store.

    sqlite3 is blocking, so each operation runs in the threadpool.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(CREATE_TABLE_SQL)
                conn.execute(CREATE_INDEX_SQL)
                conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to initialize favorites database: {e}") from e

    def _list(self) -> list[FavoriteEvent]:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                f"SELECT {SELECT_COLUMNS} FROM favorites ORDER BY created_at ASC, rowid ASC"
            )
            return [row_to_favorite(row) for row in cursor.fetchall()]

    def _add(self, values: dict[str, str]) -> AddFavoriteResult:
        descriptive = [values[f] for f in DESCRIPTIVE_FIELDS]
        with sqlite3.connect(self.db_path, timeout=30.0) as conn:
            cursor = conn.execute(
                INSERT_IF_ABSENT_SQL,
                (values["event_id"], *descriptive, utc_timestamp()),
            )
            created = cursor.rowcount == 1
            if not created:
                conn.execute(UPDATE_FIELDS_SQL, (*descriptive, values["event_id"]))
            conn.commit()

            row = conn.execute(
                f"SELECT {SELECT_COLUMNS} FROM favorites WHERE event_id = ?",
                (values["event_id"],),
            ).fetchone()

        if row is None:
            raise StoreError("Failed to update existing favorite")
        return AddFavoriteResult(favorite=row_to_favorite(row), created=created)

    def _remove(self, event_id: str) -> FavoriteEvent | None:
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                f"SELECT {SELECT_COLUMNS} FROM favorites WHERE event_id = ?",
                (event_id,),
            ).fetchone()
            if row is None:
                return None
            conn.execute("DELETE FROM favorites WHERE event_id = ?", (event_id,))
            conn.commit()
        return row_to_favorite(row)

    async def list_favorites(self) -> list[FavoriteEvent]:
        try:
            return await run_in_threadpool(self._list)
        except sqlite3.Error as e:
            raise StoreError(f"Failed to list favorites: {e}") from e

    async def add_favorite(self, payload: FavoriteEventPayload) -> AddFavoriteResult:
        values = validate_payload(payload)
        try:
            result = await run_in_threadpool(self._add, values)
        except sqlite3.Error as e:
            raise StoreError(f"Failed to add favorite: {e}") from e

        logger.info(
            "%s favorite %s",
            "Created" if result.created else "Updated",
            values["event_id"],
        )
        return result

    async def remove_favorite(self, event_id: str) -> FavoriteEvent | None:
        try:
            removed = await run_in_threadpool(self._remove, event_id)
        except sqlite3.Error as e:
            raise StoreError(f"Failed to remove favorite: {e}") from e

        if removed is None:
            logger.debug("Favorite %s not present, nothing removed", event_id)
        else:
            logger.info("Removed favorite %s", event_id)
        return removed


def is_turso_url(url: str) -> bool:
    """libsql:// and http(s):// locations are served by Turso."""
    return url.startswith(("libsql://", "https://", "http://", "wss://", "ws://"))


# Singleton instance
_store: FavoriteStore | None = None


def get_favorite_store() -> FavoriteStore:
    """
    Get the favorites store for the configured DATABASE_URL.

    Returns a TursoFavoriteStore for libsql:// URLs, otherwise a
    SQLiteFavoriteStore on the given path (data/favorites.db by default).
    """
    global _store
    if _store is None:
        settings = get_settings()
        location = settings.favorites_db
        if is_turso_url(location):
            from showfinder.services.turso_favorites import TursoFavoriteStore

            _store = TursoFavoriteStore(url=location, auth_token=settings.turso_auth_token)
            logger.info("Favorites store initialized with Turso: %s", location)
        else:
            _store = SQLiteFavoriteStore(location)
            logger.info("Favorites store initialized with SQLite: %s", location)
    return _store


def init_favorite_store(store: FavoriteStore) -> FavoriteStore:
    """Install a specific store as the global instance."""
    global _store
    _store = store
    return _store


async def close_favorite_store() -> None:
    """Close the global store if one was created."""
    global _store
    if _store is not None:
        await _store.close()
        _store = None
