"""
Local-device inventory store backed by SQLite through SQLAlchemy Core.

Statements run in worker threads via asyncio.to_thread so the event loop
keeps serving while SQLite works. Calls for the same id are still ordered by
the per-id lock, which is held across the awaited thread call.
"""
from __future__ import annotations
import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine

from .identity import ensure_identity
from .models import InventoryItem
from .repo import KeyedLocks

logger = logging.getLogger(__name__)

metadata = MetaData()

inventory_items = Table(
    "inventory_items",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", Text, nullable=True),
    Column("quantity", Integer, nullable=False),
    Column("sku", Text, nullable=False),
)


def _row_to_item(row: Any) -> InventoryItem:
    return InventoryItem(id=UUID(row.id), name=row.name, quantity=row.quantity, sku=row.sku)


class LocalInventoryRepo:
    def __init__(self, engine: Engine):
        self.engine = engine
        self._locks = KeyedLocks()
        # SQLite allows one writer; worker threads take turns on the file
        self._db_lock = threading.Lock()
        self._initialized = False

    def init_tables(self):
        """Create the table if it does not exist yet"""
        with self._db_lock:
            self._init_tables()

    def _init_tables(self):
        if not self._initialized:
            metadata.create_all(self.engine)
            self._initialized = True

    # ---- Blocking helpers (run in worker threads) ----
    def _select_all(self) -> List[InventoryItem]:
        with self._db_lock:
            self._init_tables()
            with self.engine.connect() as conn:
                rows = conn.execute(select(inventory_items)).fetchall()
        return [_row_to_item(r) for r in rows]

    def _select_one(self, item_id: UUID) -> Optional[InventoryItem]:
        with self._db_lock:
            self._init_tables()
            with self.engine.connect() as conn:
                row = conn.execute(
                    select(inventory_items).where(inventory_items.c.id == str(item_id))
                ).first()
        return _row_to_item(row) if row is not None else None

    def _upsert_row(self, values: Dict[str, Any]) -> InventoryItem:
        stmt = sqlite_insert(inventory_items).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[inventory_items.c.id],
            set_={"name": stmt.excluded.name, "quantity": stmt.excluded.quantity, "sku": stmt.excluded.sku},
        )
        with self._db_lock:
            self._init_tables()
            with self.engine.begin() as conn:
                conn.execute(stmt)
                row = conn.execute(
                    select(inventory_items).where(inventory_items.c.id == values["id"])
                ).first()
        return _row_to_item(row)

    def _delete_row(self, item_id: UUID) -> bool:
        with self._db_lock:
            self._init_tables()
            with self.engine.begin() as conn:
                result = conn.execute(delete(inventory_items).where(inventory_items.c.id == str(item_id)))
        return result.rowcount > 0

    # ---- Item store contract ----
    async def get_all(self) -> List[InventoryItem]:
        return await asyncio.to_thread(self._select_all)

    async def get_by_id(self, item_id: UUID) -> Optional[InventoryItem]:
        return await asyncio.to_thread(self._select_one, item_id)

    async def upsert(self, item: InventoryItem) -> InventoryItem:
        item_id = ensure_identity(item.id)
        values = {"id": str(item_id), "name": item.name, "quantity": item.quantity, "sku": item.sku}
        async with self._locks.hold(item_id):
            stored = await asyncio.to_thread(self._upsert_row, values)
        logger.debug(f"Upserted item {item_id} in local store")
        return stored

    async def remove(self, item_id: UUID) -> bool:
        async with self._locks.hold(item_id):
            return await asyncio.to_thread(self._delete_row, item_id)
