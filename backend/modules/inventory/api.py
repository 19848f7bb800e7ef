from __future__ import annotations
from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, HTTPException

from common.deps import get_inventory_service, get_originator
from common.dto import ErrorOut
from core.websocket import ObserverHandle
from .models import InventoryItem
from .schemas import InventoryItemIn, RemoveResult
from .service import InventoryService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[InventoryItem])
async def get_inventory_items(svc: InventoryService = Depends(get_inventory_service)):
    """List every stored item"""
    return await svc.list_items()


@router.get("/{item_id}", response_model=InventoryItem, responses={404: {"model": ErrorOut}})
async def get_inventory_item(item_id: UUID, svc: InventoryService = Depends(get_inventory_service)):
    item = await svc.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


@router.post("", response_model=InventoryItem, responses={422: {"model": ErrorOut}})
async def save_inventory_item(
    body: InventoryItemIn,
    svc: InventoryService = Depends(get_inventory_service),
    originator: Optional[ObserverHandle] = Depends(get_originator),
):
    """
    Insert or update an item and push the new quantity to connected clients.
    Returns the stored copy, including the server-assigned id.
    """
    candidate = InventoryItem.model_validate(body.model_dump())
    return await svc.save(candidate, originator=originator)


@router.delete("/{item_id}", response_model=RemoveResult)
async def remove_inventory_item(item_id: UUID, svc: InventoryService = Depends(get_inventory_service)):
    return RemoveResult(removed=await svc.remove(item_id))


__all__ = ["router"]
