"""
Record Store — interface consumed by the record services.

A production deployment plugs in its key-value database; ``MemoryRecordStore``
keeps records in process memory and is used for development and tests.
"""
import logging
from typing import Any, Optional, Protocol, runtime_checkable

import orjson

from ..conf import OWNER_KEY, VAULT_LOGGER

logger = logging.getLogger(VAULT_LOGGER)


@runtime_checkable
class RecordStore(Protocol):
    """Asynchronous key-value store of records keyed by ``id``."""

    async def get(self, record_id: str) -> Optional[dict]:
        ...

    async def put(self, record: dict) -> None:
        ...

    async def update(self, record_id: str, patch: dict) -> dict:
        ...

    async def delete(self, record_id: str) -> None:
        ...

    async def query(self, owner_id: Any) -> list[dict]:
        ...


class MemoryRecordStore:
    """In-memory RecordStore.

    Records are kept as orjson snapshots so callers never share mutable
    state with the store.
    """

    def __init__(self, name: str = "records"):
        self.name = name
        self._items: dict[str, bytes] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._items

    async def get(self, record_id: str) -> Optional[dict]:
        raw = self._items.get(record_id)
        if raw is None:
            return None
        return orjson.loads(raw)

    async def put(self, record: dict) -> None:
        try:
            record_id = record["id"]
        except KeyError:
            raise ValueError("Record requires an 'id' attribute") from None
        self._items[record_id] = orjson.dumps(record)

    async def update(self, record_id: str, patch: dict) -> dict:
        raw = self._items.get(record_id)
        if raw is None:
            raise KeyError(record_id)
        record = orjson.loads(raw)
        record.update(patch)
        record["id"] = record_id
        self._items[record_id] = orjson.dumps(record)
        return record

    async def delete(self, record_id: str) -> None:
        self._items.pop(record_id, None)

    async def query(self, owner_id: Any) -> list[dict]:
        records = [orjson.loads(raw) for raw in self._items.values()]
        return [r for r in records if r.get(OWNER_KEY) == owner_id]
