from __future__ import annotations
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Protocol
from uuid import UUID

from .identity import ensure_identity
from .models import InventoryItem

logger = logging.getLogger(__name__)


class InventoryRepo(Protocol):
    """
    Item store contract shared by the server store, the local-device store
    and the remote client. Reads return None for unknown ids, never raise.
    """

    async def get_all(self) -> List[InventoryItem]: ...

    async def get_by_id(self, item_id: UUID) -> Optional[InventoryItem]: ...

    async def upsert(self, item: InventoryItem) -> InventoryItem: ...

    async def remove(self, item_id: UUID) -> bool: ...


class KeyedLocks:
    """
    One asyncio.Lock per identity, so unrelated ids never wait on each other.
    An entry lives only while some caller holds or waits for it.
    """

    def __init__(self):
        self._locks: Dict[UUID, asyncio.Lock] = {}
        self._holders: Dict[UUID, int] = {}

    @asynccontextmanager
    async def hold(self, item_id: UUID):
        lock = self._locks.get(item_id)
        if lock is None:
            lock = self._locks[item_id] = asyncio.Lock()
        self._holders[item_id] = self._holders.get(item_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[item_id] -= 1
            if self._holders[item_id] == 0:
                del self._holders[item_id]
                del self._locks[item_id]

    def __len__(self) -> int:
        return len(self._locks)


class InMemoryInventoryRepo:
    """Server-side store: a dict of identity -> item, copies in and out"""

    def __init__(self):
        self._items: Dict[UUID, InventoryItem] = {}
        self._locks = KeyedLocks()

    async def get_all(self) -> List[InventoryItem]:
        return [item.model_copy() for item in list(self._items.values())]

    async def get_by_id(self, item_id: UUID) -> Optional[InventoryItem]:
        item = self._items.get(item_id)
        return item.model_copy() if item is not None else None

    async def upsert(self, item: InventoryItem) -> InventoryItem:
        item_id = ensure_identity(item.id)
        async with self._locks.hold(item_id):
            stored = item.model_copy(update={"id": item_id})
            created = item_id not in self._items
            self._items[item_id] = stored
        logger.debug(f"{'Inserted' if created else 'Updated'} item {item_id}")
        return stored.model_copy()

    async def remove(self, item_id: UUID) -> bool:
        async with self._locks.hold(item_id):
            removed = self._items.pop(item_id, None) is not None
        return removed

    def clear(self):
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
