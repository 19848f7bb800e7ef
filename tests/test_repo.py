import asyncio
import threading
import uuid

import pytest

from modules.inventory.local_repo import LocalInventoryRepo
from modules.inventory.models import EMPTY_ID
from modules.inventory.repo import InMemoryInventoryRepo
from core.db import create_local_engine


@pytest.fixture(params=["memory", "local"])
def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryInventoryRepo()
        return
    engine = create_local_engine(f"sqlite:///{tmp_path / 'warehouse.db3'}")
    yield LocalInventoryRepo(engine)
    engine.dispose()


@pytest.mark.asyncio
async def test_upsert_assigns_identity(store, make_item):
    stored = await store.upsert(make_item())
    assert stored.id != EMPTY_ID
    assert await store.get_by_id(stored.id) == stored


@pytest.mark.asyncio
async def test_upsert_honors_supplied_identity(store, make_item):
    item_id = uuid.uuid4()
    stored = await store.upsert(make_item(id=item_id))
    assert stored.id == item_id


@pytest.mark.asyncio
async def test_upsert_overwrites_existing_record(store, make_item):
    stored = await store.upsert(make_item())
    await store.upsert(make_item(id=stored.id, name="Gadget", quantity=3, sku="SKU-002"))

    items = await store.get_all()
    assert len(items) == 1
    assert (items[0].name, items[0].quantity, items[0].sku) == ("Gadget", 3, "SKU-002")


@pytest.mark.asyncio
async def test_get_by_id_unknown_returns_none(store):
    assert await store.get_by_id(uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_get_all_returns_every_item(store, make_item):
    for i in range(5):
        await store.upsert(make_item(sku=f"SKU-{i}"))
    items = await store.get_all()
    assert sorted(i.sku for i in items) == [f"SKU-{i}" for i in range(5)]


@pytest.mark.asyncio
async def test_remove(store, make_item):
    assert await store.remove(uuid.uuid4()) is False

    stored = await store.upsert(make_item())
    assert await store.remove(stored.id) is True
    assert await store.get_by_id(stored.id) is None
    assert await store.remove(stored.id) is False


@pytest.mark.asyncio
async def test_returned_copies_do_not_alias_stored_state(store, make_item):
    candidate = make_item()
    stored = await store.upsert(candidate)

    candidate.quantity = 999
    stored.name = "Changed"
    fetched = await store.get_by_id(stored.id)
    fetched.sku = "Changed"

    again = await store.get_by_id(stored.id)
    assert (again.name, again.quantity, again.sku) == ("Widget", 10, "SKU-001")


@pytest.mark.asyncio
async def test_upsert_does_not_mutate_caller_item(store, make_item):
    candidate = make_item()
    await store.upsert(candidate)
    assert candidate.id == EMPTY_ID


@pytest.mark.asyncio
async def test_concurrent_upserts_distinct_ids(store, make_item):
    results = await asyncio.gather(*(store.upsert(make_item(sku=f"SKU-{i}")) for i in range(100)))
    assert len({r.id for r in results}) == 100
    assert len(await store.get_all()) == 100


@pytest.mark.asyncio
async def test_lock_map_is_empty_after_remove_misses(store):
    for _ in range(1000):
        assert await store.remove(uuid.uuid4()) is False
    assert len(store._locks) == 0


@pytest.mark.asyncio
async def test_lock_map_is_empty_after_completed_upserts(store, make_item):
    item_id = uuid.uuid4()
    await asyncio.gather(*(store.upsert(make_item(id=item_id, quantity=q)) for q in range(1, 21)))
    await asyncio.gather(*(store.upsert(make_item(sku=f"SKU-{i}")) for i in range(20)))
    assert len(store._locks) == 0
    assert len(await store.get_all()) == 21


def test_local_store_persists_across_instances(tmp_path, make_item):
    engine = create_local_engine(f"sqlite:///{tmp_path / 'warehouse.db3'}")
    stored = asyncio.run(LocalInventoryRepo(engine).upsert(make_item()))

    fetched = asyncio.run(LocalInventoryRepo(engine).get_by_id(stored.id))
    assert fetched == stored
    engine.dispose()


@pytest.mark.asyncio
async def test_local_store_in_memory_uri(make_item):
    store = LocalInventoryRepo(create_local_engine("sqlite://"))
    stored = await store.upsert(make_item(name=None))
    fetched = await store.get_by_id(stored.id)
    assert fetched.name is None


def test_store_is_selected_at_composition_time():
    from common.deps import build_inventory_repo

    assert isinstance(build_inventory_repo("memory"), InMemoryInventoryRepo)
    with pytest.raises(ValueError):
        build_inventory_repo("postgres")


@pytest.mark.asyncio
async def test_local_store_writes_do_not_block_event_loop(tmp_path, make_item):
    engine = create_local_engine(f"sqlite:///{tmp_path / 'warehouse.db3'}")
    store = LocalInventoryRepo(engine)
    gate = threading.Event()
    slow_id = uuid.uuid4()
    write_row = store._upsert_row

    def gated_write(values):
        if values["id"] == str(slow_id):
            gate.wait(5)
        return write_row(values)

    store._upsert_row = gated_write
    slow = asyncio.create_task(store.upsert(make_item(id=slow_id)))
    try:
        ticks = 0
        for _ in range(5):
            await asyncio.sleep(0.01)
            ticks += 1
        fast = await asyncio.wait_for(store.upsert(make_item(sku="SKU-FAST")), 2)

        assert ticks == 5
        assert fast.sku == "SKU-FAST"
        assert not slow.done()
    finally:
        gate.set()

    stored = await asyncio.wait_for(slow, 2)
    assert stored.id == slow_id
    assert len(await store.get_all()) == 2
    engine.dispose()
