from __future__ import annotations
from typing import List, Optional
from uuid import UUID
import logging

from core.errors import FieldError, ValidationError
from core.websocket import ObserverHandle, UpdateBroadcaster
from .identity import is_empty_identity
from .models import InventoryItem, ItemUpdate, QUANTITY_MAX, QUANTITY_MIN
from .repo import InventoryRepo

logger = logging.getLogger(__name__)


def validate_item(item: InventoryItem) -> None:
    """Raise ValidationError listing every failing field"""
    errors: List[FieldError] = []
    if not item.name or not item.name.strip():
        errors.append(FieldError(field="name", message="Name is required"))
    if not QUANTITY_MIN <= item.quantity <= QUANTITY_MAX:
        errors.append(FieldError(
            field="quantity",
            message=f"Quantity must be between {QUANTITY_MIN} and {QUANTITY_MAX}",
        ))
    if not item.sku or not item.sku.strip():
        errors.append(FieldError(field="sku", message="Sku is required"))
    if errors:
        raise ValidationError(errors)


class InventoryService:
    def __init__(self, repo: InventoryRepo, broadcaster: Optional[UpdateBroadcaster] = None):
        self.repo = repo
        self.broadcaster = broadcaster

    # ---- Queries ----
    async def list_items(self) -> List[InventoryItem]:
        return await self.repo.get_all()

    async def get_item(self, item_id: UUID) -> Optional[InventoryItem]:
        return await self.repo.get_by_id(item_id)

    # ---- Mutations ----
    async def save(self, candidate: InventoryItem, originator: Optional[ObserverHandle] = None) -> InventoryItem:
        """
        Insert or update `candidate` and notify observers.

        An existing record keeps its id and has name, quantity and sku
        overwritten. An unknown or empty id is inserted; a supplied id is
        honored as given. Returns the stored copy, never `candidate`.
        """
        validate_item(candidate)

        existing = None
        if not is_empty_identity(candidate.id):
            existing = await self.repo.get_by_id(candidate.id)

        if existing is not None:
            existing.name = candidate.name
            existing.quantity = candidate.quantity
            existing.sku = candidate.sku
            stored = await self.repo.upsert(existing)
        else:
            stored = await self.repo.upsert(candidate)
            logger.info(f"Created item {stored.id} (sku={stored.sku})")

        self._notify(stored, originator)
        return stored

    async def remove(self, item_id: UUID) -> bool:
        return await self.repo.remove(item_id)

    def _notify(self, item: InventoryItem, originator: Optional[ObserverHandle]):
        if self.broadcaster is None:
            return
        try:
            update = ItemUpdate.from_item(item)
            self.broadcaster.publish(update.model_dump(mode="json"), exclude=originator)
        except Exception as e:
            # Notification problems never fail a save that already persisted
            logger.error(f"Broadcast for item {item.id} failed: {e}", exc_info=True)
