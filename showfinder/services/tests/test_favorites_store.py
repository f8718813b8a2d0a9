"""Tests for the SQLite favorites store."""

import asyncio
import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest

from showfinder.errors import StoreError, ValidationError
from showfinder.models import FavoriteEventPayload
from showfinder.services.favorites import (
    SQLiteFavoriteStore,
    close_favorite_store,
    get_favorite_store,
    init_favorite_store,
    is_turso_url,
    validate_payload,
)


@pytest.fixture
def store(tmp_path):
    """Create a store backed by a temporary database."""
    return SQLiteFavoriteStore(tmp_path / "favorites.db")


def payload(event_id="E1", name="Jazz Night", **fields) -> FavoriteEventPayload:
    return FavoriteEventPayload(id=event_id, name=name, **fields)


class TestSQLiteFavoriteStoreInit:
    """Tests for schema setup."""

    def test_creates_database_file(self, tmp_path):
        db_path = tmp_path / "nested" / "favorites.db"
        SQLiteFavoriteStore(db_path)
        assert db_path.exists()

    def test_creates_table(self, store):
        with sqlite3.connect(store.db_path) as conn:
            tables = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        assert ("favorites",) in tables


class TestAddFavorite:
    """Tests for add_favorite."""

    @pytest.mark.asyncio
    async def test_create(self, store):
        result = await store.add_favorite(payload(venue="Blue Note", date="2025-05-01"))

        assert result.created is True
        assert result.favorite.id == "E1"
        assert result.favorite.venue == "Blue Note"
        assert result.favorite.time == ""
        assert result.favorite.created_at.endswith("Z")

    @pytest.mark.asyncio
    async def test_add_twice_updates_in_place(self, store):
        """Same id twice: one record, original createdAt, latest fields."""
        first = await store.add_favorite(payload(venue="Old Venue"))
        second = await store.add_favorite(payload(name="Renamed", venue="New Venue"))

        assert second.created is False
        assert second.favorite.created_at == first.favorite.created_at
        assert second.favorite.name == "Renamed"
        assert second.favorite.venue == "New Venue"

        favorites = await store.list_favorites()
        assert len(favorites) == 1

    def test_concurrent_adds_for_one_id(self, store):
        """Racing threads: exactly one create, the rest update, none fail."""
        workers = 4
        for round_number in range(25):
            event_id = f"race-{round_number}"
            barrier = threading.Barrier(workers)

            def add(index):
                barrier.wait()
                return store._add(
                    validate_payload(payload(event_id, name=f"Writer {index}"))
                )

            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(add, range(workers)))

            assert sum(result.created for result in results) == 1
            assert len({result.favorite.created_at for result in results}) == 1

        with sqlite3.connect(store.db_path) as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM favorites").fetchone()
        assert count == 25

    @pytest.mark.asyncio
    async def test_concurrent_requests_report_created_once(self, store):
        results = await asyncio.gather(
            *(store.add_favorite(payload(name=f"Writer {i}")) for i in range(4))
        )

        assert sorted(result.created for result in results) == [False, False, False, True]

    @pytest.mark.asyncio
    async def test_name_is_trimmed(self, store):
        result = await store.add_favorite(payload(name="  Spaced Out  "))
        assert result.favorite.name == "Spaced Out"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "bad",
        [
            FavoriteEventPayload(name="No id"),
            FavoriteEventPayload(id="E1"),
            FavoriteEventPayload(id="E1", name="   "),
            FavoriteEventPayload(id="", name="Empty id"),
        ],
    )
    async def test_invalid_payload(self, store, bad):
        with pytest.raises(ValidationError, match="Invalid favorite payload"):
            await store.add_favorite(bad)


class TestListFavorites:
    """Tests for list_favorites."""

    @pytest.mark.asyncio
    async def test_empty(self, store):
        assert await store.list_favorites() == []

    @pytest.mark.asyncio
    async def test_ordered_oldest_first(self, store):
        with patch(
            "showfinder.services.favorites.utc_timestamp",
            side_effect=["2025-01-03T00:00:00.000Z", "2025-01-01T00:00:00.000Z"],
        ):
            await store.add_favorite(payload("late", "Late"))
            await store.add_favorite(payload("early", "Early"))

        favorites = await store.list_favorites()
        assert [favorite.id for favorite in favorites] == ["early", "late"]

    @pytest.mark.asyncio
    async def test_equal_timestamps_keep_insertion_order(self, store):
        with patch(
            "showfinder.services.favorites.utc_timestamp",
            return_value="2025-01-01T00:00:00.000Z",
        ):
            for event_id in ("b", "a", "c"):
                await store.add_favorite(payload(event_id, event_id.upper()))

        favorites = await store.list_favorites()
        assert [favorite.id for favorite in favorites] == ["b", "a", "c"]


class TestRemoveFavorite:
    """Tests for remove_favorite."""

    @pytest.mark.asyncio
    async def test_remove_returns_record(self, store):
        await store.add_favorite(payload(genre="Music"))

        removed = await store.remove_favorite("E1")

        assert removed.id == "E1"
        assert removed.genre == "Music"
        assert await store.list_favorites() == []

    @pytest.mark.asyncio
    async def test_remove_missing_is_not_an_error(self, store):
        assert await store.remove_favorite("nope") is None

    @pytest.mark.asyncio
    async def test_remove_twice(self, store):
        await store.add_favorite(payload())
        assert await store.remove_favorite("E1") is not None
        assert await store.remove_favorite("E1") is None


class TestStoreErrors:
    """Tests for backend failure wrapping."""

    @pytest.mark.asyncio
    async def test_sqlite_error_becomes_store_error(self, store):
        with patch.object(store, "_list", side_effect=sqlite3.OperationalError("disk I/O error")):
            with pytest.raises(StoreError, match="disk I/O error"):
                await store.list_favorites()

    @pytest.mark.asyncio
    async def test_add_error_becomes_store_error(self, store):
        with patch.object(store, "_add", side_effect=sqlite3.OperationalError("locked")):
            with pytest.raises(StoreError):
                await store.add_favorite(payload())


class TestGetFavoriteStore:
    """Tests for backend selection."""

    def test_is_turso_url(self):
        assert is_turso_url("libsql://db.turso.io")
        assert is_turso_url("https://db.turso.io")
        assert not is_turso_url("/tmp/favorites.db")
        assert not is_turso_url("data/favorites.db")

    @pytest.mark.asyncio
    async def test_sqlite_for_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", str(tmp_path / "fav.db"))

        with patch("showfinder.services.favorites._store", None):
            store = get_favorite_store()
            assert isinstance(store, SQLiteFavoriteStore)
            assert get_favorite_store() is store
            await close_favorite_store()

    @pytest.mark.asyncio
    async def test_turso_for_libsql_url(self, monkeypatch):
        from showfinder.services.turso_favorites import TursoFavoriteStore

        monkeypatch.setenv("DATABASE_URL", "libsql://db.turso.io")
        monkeypatch.setenv("TURSO_AUTH_TOKEN", "tok")

        with patch("showfinder.services.favorites._store", None):
            store = get_favorite_store()
            assert isinstance(store, TursoFavoriteStore)
            assert store._auth_token == "tok"
            await close_favorite_store()

    @pytest.mark.asyncio
    async def test_init_favorite_store(self, store):
        with patch("showfinder.services.favorites._store", None):
            assert init_favorite_store(store) is store
            assert get_favorite_store() is store
