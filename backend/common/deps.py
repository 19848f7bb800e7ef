# common/deps.py
from typing import Optional

from fastapi import Depends, Header

from core.config import settings
from core.websocket import ObserverHandle, broadcaster, originator_for
from modules.inventory.repo import InMemoryInventoryRepo, InventoryRepo
from modules.inventory.service import InventoryService
from modules.scanner import BarcodeScanner, get_scanner as _get_scanner

_repo: Optional[InventoryRepo] = None


# ---------------------------
# Item store (selected once, at composition time)
# ---------------------------
def build_inventory_repo(kind: Optional[str] = None) -> InventoryRepo:
    kind = (kind or settings.INVENTORY_STORE).lower()
    if kind == "memory":
        return InMemoryInventoryRepo()
    if kind == "local":
        from core.db import get_local_engine
        from modules.inventory.local_repo import LocalInventoryRepo
        return LocalInventoryRepo(get_local_engine())
    raise ValueError(f"Unknown INVENTORY_STORE: {kind!r} (expected 'memory' or 'local')")


def get_inventory_repo() -> InventoryRepo:
    global _repo
    if _repo is None:
        _repo = build_inventory_repo()
    return _repo


def get_inventory_service(repo: InventoryRepo = Depends(get_inventory_repo)) -> InventoryService:
    return InventoryService(repo, broadcaster)


# ---------------------------
# Real-time originator
# ---------------------------
async def get_originator(x_connection_id: Optional[str] = Header(None)) -> Optional[ObserverHandle]:
    """The caller's own socket connection, excluded from the broadcast its save triggers."""
    return originator_for(x_connection_id)


# ---------------------------
# Barcode scanner
# ---------------------------
def get_scanner() -> BarcodeScanner:
    return _get_scanner()
