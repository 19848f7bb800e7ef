from pydantic import BaseModel

from .models import InventoryItem


# Inputs
class InventoryItemIn(InventoryItem):
    """Body of POST /api/inventory; checked against business rules by the service"""


# Outputs
class RemoveResult(BaseModel):
    removed: bool
