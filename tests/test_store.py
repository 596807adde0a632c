"""Tests for MemoryRecordStore."""
import pytest

from navigator_vault.records.store import MemoryRecordStore, RecordStore


class TestMemoryRecordStore:
    """Tests for the in-memory record store."""

    def test_implements_protocol(self):
        assert isinstance(MemoryRecordStore(), RecordStore)

    @pytest.mark.asyncio
    async def test_put_get_copies(self):
        """Test stored records are snapshots, not shared references."""
        store = MemoryRecordStore()
        record = {"id": "r1", "ownerId": "u1", "notes": "a"}
        await store.put(record)
        record["notes"] = "changed"
        fetched = await store.get("r1")
        assert fetched["notes"] == "a"
        fetched["notes"] = "again"
        assert (await store.get("r1"))["notes"] == "a"

    @pytest.mark.asyncio
    async def test_put_requires_id(self):
        with pytest.raises(ValueError):
            await MemoryRecordStore().put({"ownerId": "u1"})

    @pytest.mark.asyncio
    async def test_update_merges(self):
        """Test update only replaces the patched attributes."""
        store = MemoryRecordStore()
        await store.put({"id": "r1", "ownerId": "u1", "a": 1, "b": 2})
        updated = await store.update("r1", {"b": 3, "id": "other"})
        assert updated == {"id": "r1", "ownerId": "u1", "a": 1, "b": 3}

    @pytest.mark.asyncio
    async def test_update_missing(self):
        with pytest.raises(KeyError):
            await MemoryRecordStore().update("nope", {"a": 1})

    @pytest.mark.asyncio
    async def test_query_and_delete(self):
        """Test owner scoping and removal."""
        store = MemoryRecordStore()
        await store.put({"id": "r1", "ownerId": "u1"})
        await store.put({"id": "r2", "ownerId": "u2"})
        assert [r["id"] for r in await store.query("u1")] == ["r1"]
        await store.delete("r1")
        assert await store.get("r1") is None
        assert await store.query("u1") == []
        await store.delete("r1")
