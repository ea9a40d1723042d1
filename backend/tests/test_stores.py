"""
KK's Cafe Backend - Record Store Tests
=======================================

What:  Tests for the JSON file, in-memory and SQL drink stores.

What we test:
    ✅ Missing JSON file loads as an empty menu
    ✅ save → load round trip preserves records and order
    ✅ Pretty-printed, field-ordered JSON on disk
    ✅ Corrupt JSON / non-UTF-8 / malformed records raise StorageError (not [])
    ✅ Legacy single-image records are upgraded on load
    ✅ Failed writes raise StorageError and leave no temp files
    ✅ SQL store round trip on a temporary SQLite database
"""

import json

import pytest

from kkcafe.exceptions import StorageError
from kkcafe.schemas.drink import Drink
from kkcafe.stores import InMemoryDrinkStore, JsonFileDrinkStore
from kkcafe.stores.sql_store import SqlDrinkStore


def _menu():
    return [
        Drink(id=1, name="Latte", description="Hot milk coffee", images=["/uploads/a.png"]),
        Drink(id=2, name="Mocha", description="Chocolate coffee", images=[]),
        Drink(
            id=3,
            name="Matcha",
            description="Green tea",
            images=["http://cdn/x.png", "/uploads/b.png"],
        ),
    ]


class TestJsonFileDrinkStore:

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileDrinkStore(str(tmp_path / "data.json"))
        assert await store.load() == []

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path):
        store = JsonFileDrinkStore(str(tmp_path / "data.json"))
        await store.save(_menu())

        loaded = await store.load()
        assert loaded == _menu()

        await store.save(loaded)
        assert await store.load() == _menu()

    @pytest.mark.asyncio
    async def test_file_format(self, tmp_path):
        path = tmp_path / "data.json"
        store = JsonFileDrinkStore(str(path))
        await store.save(_menu()[:1])

        text = path.read_text(encoding="utf-8")
        assert text.startswith("[\n  {\n")
        assert list(json.loads(text)[0].keys()) == ["id", "name", "description", "images", "image"]
        assert json.loads(text)[0]["image"] == "/uploads/a.png"

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_path):
        store = JsonFileDrinkStore(str(tmp_path / "nested" / "dir" / "data.json"))
        await store.save(_menu())
        assert len(await store.load()) == 3

    @pytest.mark.asyncio
    async def test_corrupt_json_raises(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("[{not json", encoding="utf-8")
        store = JsonFileDrinkStore(str(path))

        with pytest.raises(StorageError):
            await store.load()

    @pytest.mark.asyncio
    async def test_invalid_utf8_raises(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_bytes(b'[{"id": 1, "name": "\xff\xfe", "description": "x", "images": []}]')
        store = JsonFileDrinkStore(str(path))

        with pytest.raises(StorageError):
            await store.load()
        assert await store.health_check() is False

    @pytest.mark.asyncio
    async def test_malformed_records_raise(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text('[{"name": "no id"}]', encoding="utf-8")
        store = JsonFileDrinkStore(str(path))

        with pytest.raises(StorageError):
            await store.load()

    @pytest.mark.asyncio
    async def test_non_array_document_raises(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text('{"drinks": []}', encoding="utf-8")

        with pytest.raises(StorageError):
            await JsonFileDrinkStore(str(path)).load()

    @pytest.mark.asyncio
    async def test_legacy_single_image_records(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(
            json.dumps([
                {"id": 10, "name": "Espresso", "description": "Short", "image": "/uploads/e.png"},
                {"id": 11, "name": "Water", "description": "Still", "image": ""},
            ]),
            encoding="utf-8",
        )

        espresso, water = await JsonFileDrinkStore(str(path)).load()
        assert espresso.images == ["/uploads/e.png"]
        assert espresso.image == "/uploads/e.png"
        assert water.images == []
        assert water.image == ""

    @pytest.mark.asyncio
    async def test_unreadable_path_raises(self, tmp_path):
        """A directory where the data file should be cannot be read."""
        store = JsonFileDrinkStore(str(tmp_path))
        with pytest.raises(StorageError):
            await store.load()

    @pytest.mark.asyncio
    async def test_failed_write_raises_and_cleans_up(self, tmp_path):
        target = tmp_path / "data.json"
        target.mkdir()
        store = JsonFileDrinkStore(str(target))

        with pytest.raises(StorageError):
            await store.save(_menu())

        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]


class TestInMemoryDrinkStore:

    @pytest.mark.asyncio
    async def test_round_trip(self):
        store = InMemoryDrinkStore()
        await store.save(_menu())
        assert await store.load() == _menu()

    @pytest.mark.asyncio
    async def test_loaded_records_are_copies(self):
        store = InMemoryDrinkStore(_menu())
        loaded = await store.load()
        loaded[0].images.append("/uploads/zzz.png")
        loaded.pop()

        fresh = await store.load()
        assert len(fresh) == 3
        assert fresh[0].images == ["/uploads/a.png"]

    @pytest.mark.asyncio
    async def test_health_check(self):
        assert await InMemoryDrinkStore().health_check() is True


class TestSqlDrinkStore:

    @pytest.mark.asyncio
    async def test_empty_database(self, tmp_path):
        store = SqlDrinkStore(f"sqlite+aiosqlite:///{tmp_path / 'drinks.db'}")
        try:
            assert await store.load() == []
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_round_trip_preserves_order(self, tmp_path):
        store = SqlDrinkStore(f"sqlite+aiosqlite:///{tmp_path / 'drinks.db'}")
        try:
            menu = list(reversed(_menu()))
            await store.save(menu)
            assert await store.load() == menu
        finally:
            await store.close()

    @pytest.mark.asyncio
    async def test_save_replaces_everything(self, tmp_path):
        store = SqlDrinkStore(f"sqlite+aiosqlite:///{tmp_path / 'drinks.db'}")
        try:
            await store.save(_menu())
            await store.save(_menu()[1:2])

            loaded = await store.load()
            assert [d.id for d in loaded] == [2]
            assert loaded[0].image == ""
        finally:
            await store.close()
