from typing import Any, Dict, List

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from core.websocket import UpdateBroadcaster
from modules.inventory.models import InventoryItem
from modules.inventory.repo import InMemoryInventoryRepo
from modules.inventory.service import InventoryService


class RecordingObserver:
    """Observer send function that keeps every event it receives"""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    async def __call__(self, event: Dict[str, Any]):
        self.events.append(event)


@pytest.fixture
def make_item():
    def _make(**overrides) -> InventoryItem:
        fields = {"name": "Widget", "quantity": 10, "sku": "SKU-001"}
        fields.update(overrides)
        return InventoryItem(**fields)
    return _make


@pytest.fixture
def recorder():
    return RecordingObserver


@pytest.fixture
def repo() -> InMemoryInventoryRepo:
    return InMemoryInventoryRepo()


@pytest_asyncio.fixture
async def broadcaster():
    b = UpdateBroadcaster()
    yield b
    await b.close()


@pytest.fixture
def service(repo, broadcaster) -> InventoryService:
    return InventoryService(repo, broadcaster)


@pytest.fixture
def api_repo() -> InMemoryInventoryRepo:
    return InMemoryInventoryRepo()


@pytest.fixture
def client(api_repo):
    from app import fastapi_app
    from common.deps import get_inventory_repo

    fastapi_app.dependency_overrides[get_inventory_repo] = lambda: api_repo
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()
