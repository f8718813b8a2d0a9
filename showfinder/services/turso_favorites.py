"""
Turso/libsql implementation of the favorites store.

Provides cloud-hosted SQLite storage for favorites using Turso's
libsql-client. Same schema and semantics as SQLiteFavoriteStore.
"""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

import libsql_client
from libsql_client import LibsqlError

from showfinder.errors import StoreError
from showfinder.models import AddFavoriteResult, FavoriteEvent, FavoriteEventPayload, utc_timestamp
from showfinder.services.favorites import (
    CREATE_INDEX_SQL,
    CREATE_TABLE_SQL,
    DESCRIPTIVE_FIELDS,
    INSERT_IF_ABSENT_SQL,
    SELECT_COLUMNS,
    UPDATE_FIELDS_SQL,
    FavoriteStore,
    row_to_favorite,
    validate_payload,
)

if TYPE_CHECKING:
    from libsql_client import Client

logger = logging.getLogger(__name__)

COLUMN_NAMES = [column.strip() for column in SELECT_COLUMNS.split(",")]


def _row_values(row: Any) -> list[Any]:
    return [row[column] for column in COLUMN_NAMES]


class TursoFavoriteStore(FavoriteStore):
    """
    Favorites store backed by Turso.

    Usage:
        store = TursoFavoriteStore(
            url="libsql://your-db.turso.io",
            auth_token="your-token",
        )
        result = await store.add_favorite(payload)
        await store.close()
    """

    def __init__(self, url: str, auth_token: str):
        """
        Initialize a Turso store. No connection is made until first use.

        Args:
            url: Turso database URL (libsql://your-db.turso.io)
            auth_token: Turso authentication token
        """
        self._url = url
        self._auth_token = auth_token
        self._client: Client | None = None
        self._schema_initialized = False

    async def _get_client(self) -> Client:
        """Get or create the libsql client, ensuring the schema exists."""
        if self._client is None:
            self._client = libsql_client.create_client(
                url=self._url,
                auth_token=self._auth_token,
            )
        if not self._schema_initialized:
            await self._client.batch([CREATE_TABLE_SQL, CREATE_INDEX_SQL])
            self._schema_initialized = True
        return self._client

    async def _fetch_one(self, client: Client, event_id: str) -> FavoriteEvent | None:
        result = await client.execute(
            f"SELECT {SELECT_COLUMNS} FROM favorites WHERE event_id = ?",
            [event_id],
        )
        if not result.rows:
            return None
        return row_to_favorite(_row_values(result.rows[0]))

    async def list_favorites(self) -> list[FavoriteEvent]:
        try:
            client = await self._get_client()
            result = await client.execute(
                f"SELECT {SELECT_COLUMNS} FROM favorites ORDER BY created_at ASC, rowid ASC"
            )
        except LibsqlError as e:
            raise StoreError(f"Failed to list favorites: {e}") from e
        return [row_to_favorite(_row_values(row)) for row in result.rows]

    async def add_favorite(self, payload: FavoriteEventPayload) -> AddFavoriteResult:
        values = validate_payload(payload)
        event_id = values["event_id"]
        descriptive = [values[field] for field in DESCRIPTIVE_FIELDS]

        try:
            client = await self._get_client()
            inserted = await client.execute(
                INSERT_IF_ABSENT_SQL,
                [event_id, *descriptive, utc_timestamp()],
            )
            created = inserted.rows_affected == 1
            if not created:
                await client.execute(UPDATE_FIELDS_SQL, [*descriptive, event_id])

            favorite = await self._fetch_one(client, event_id)
        except LibsqlError as e:
            raise StoreError(f"Failed to add favorite: {e}") from e

        if favorite is None:
            raise StoreError("Failed to update existing favorite")

        logger.info("%s favorite %s", "Created" if created else "Updated", event_id)
        return AddFavoriteResult(favorite=favorite, created=created)

    async def remove_favorite(self, event_id: str) -> FavoriteEvent | None:
        try:
            client = await self._get_client()
            existing = await self._fetch_one(client, event_id)
            if existing is None:
                return None
            await client.execute("DELETE FROM favorites WHERE event_id = ?", [event_id])
        except LibsqlError as e:
            raise StoreError(f"Failed to remove favorite: {e}") from e

        logger.info("Removed favorite %s", event_id)
        return existing

    async def close(self) -> None:
        """Close the database connection."""
        if self._client:
            closing = self._client.close()
            if inspect.isawaitable(closing):
                await closing
            self._client = None
            self._schema_initialized = False
