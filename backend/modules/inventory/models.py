from __future__ import annotations
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, StrictInt, field_validator

# Identity sentinel: "no identity assigned yet"
EMPTY_ID = UUID(int=0)

QUANTITY_MIN = 1
QUANTITY_MAX = 1000


class InventoryItem(BaseModel):
    """Inventory item as stored and as exchanged over the API"""
    model_config = ConfigDict(validate_assignment=True)

    id: UUID = EMPTY_ID
    name: Optional[str] = None
    # No coercion: "5", 5.0 and true are rejected, not read as 5
    quantity: StrictInt = 0
    sku: str = ""

    @field_validator('id', mode='before')
    @classmethod
    def empty_id_to_sentinel(cls, v):
        """Missing, null or blank ids all mean 'not assigned yet'"""
        if v is None or (isinstance(v, str) and not v.strip()):
            return EMPTY_ID
        return v

    @field_validator('name')
    @classmethod
    def trim_name(cls, v):
        return v.strip() if v is not None else None

    @field_validator('sku', mode='before')
    @classmethod
    def null_sku_to_empty(cls, v):
        return "" if v is None else v


class ItemUpdate(BaseModel):
    """Event pushed to observers after a successful save"""
    id: UUID
    quantity: StrictInt

    @classmethod
    def from_item(cls, item: InventoryItem) -> "ItemUpdate":
        return cls(id=item.id, quantity=item.quantity)
