# tests/test_sql_store.py
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import anyio
import pytest
from sqlalchemy import text

from catalog_admin.schemas.product import ProductWrite
from catalog_admin.store.base import StoreError

pytestmark = [pytest.mark.anyio, pytest.mark.timeout(10)]


def _write(t0, **overrides) -> ProductWrite:
    data = {
        "name": "Widget",
        "description": "A very useful widget",
        "price": "9.99",
        "sale_price": None,
        "stock": 5,
        "category": "general",
        "images": ["https://cdn/x.jpg"],
        "specifications": {"Greutate": "2 kg"},
        "updated_at": t0,
    }
    data.update(overrides)
    return ProductWrite(**data)


async def test_insert_assigns_id_and_created_at(sql_store, t0):
    obj = await sql_store.insert(_write(t0))
    assert obj.id
    assert obj.created_at is not None and obj.created_at.tzinfo is not None
    assert obj.price == Decimal("9.99")
    assert obj.sale_price is None
    assert obj.images == ["https://cdn/x.jpg"]
    assert obj.specifications == {"Greutate": "2 kg"}


async def test_select_all_newest_first(sql_store, t0):
    for name in ("first", "second", "third"):
        await sql_store.insert(_write(t0, name=name))
        await anyio.sleep(0.01)
    rows = await sql_store.select_all()
    assert [p.name for p in rows] == ["third", "second", "first"]


async def test_get_missing_is_none(sql_store):
    assert await sql_store.get("does-not-exist") is None


async def test_update_replaces_all_mutable_fields(sql_store, t0):
    obj = await sql_store.insert(_write(t0, sale_price="5.00"))
    later = t0 + timedelta(hours=1)
    saved = await sql_store.update(
        obj.id,
        _write(t0, name="Widget v2", sale_price=None, images=[], specifications={}, updated_at=later),
    )
    assert saved is not None
    assert saved.id == obj.id
    assert saved.created_at == obj.created_at
    assert saved.name == "Widget v2"
    assert saved.sale_price is None
    assert saved.images == [] and saved.specifications == {}
    assert saved.updated_at == later

    again = await sql_store.get(obj.id)
    assert again is not None and again.name == "Widget v2"


async def test_update_missing_returns_none(sql_store, t0):
    assert await sql_store.update("nope", _write(t0)) is None
    assert await sql_store.select_all() == []


async def test_delete_is_idempotent(sql_store, t0):
    obj = await sql_store.insert(_write(t0))
    await sql_store.delete(obj.id)
    await sql_store.delete(obj.id)
    assert await sql_store.get(obj.id) is None


async def test_ping(sql_store):
    await sql_store.ping()


async def test_db_errors_become_store_errors(sql_store, t0):
    with sql_store.engine.begin() as conn:
        conn.execute(text("DROP TABLE products"))
    with pytest.raises(StoreError):
        await sql_store.select_all()
    with pytest.raises(StoreError):
        await sql_store.insert(_write(t0))
