# tests/conftest.py
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import pytest

from catalog_admin.database import init_db, make_engine
from catalog_admin.schemas.product import Product, ProductWrite
from catalog_admin.store.base import ProductStore, StoreError
from catalog_admin.store.sql import SqlProductStore

T0 = datetime(2025, 9, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def make_product(**overrides: Any) -> Product:
    data: Dict[str, Any] = {
        "id": str(uuid.uuid4()),
        "name": "Amplificator TPA3116",
        "description": "2x50W",
        "price": Decimal("129.90"),
        "sale_price": None,
        "stock": 3,
        "category": "audio",
        "images": [],
        "specifications": {},
        "created_at": T0,
        "updated_at": T0,
    }
    data.update(overrides)
    return Product(**data)


class FakeStore(ProductStore):
    """
    Store în memorie pentru teste: înregistrează apelurile și poate
    simula eșecuri per operație (`fail_on={"delete", ...}`).
    """

    def __init__(self, products: Optional[List[Product]] = None):
        self.rows: List[Product] = list(products or [])
        self.calls: List[Tuple[str, Any]] = []
        self.fail_on: set[str] = set()
        self.closed = False

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on:
            raise StoreError(f"simulated {op} failure", status_code=500)

    async def select_all(self) -> List[Product]:
        self.calls.append(("select_all", None))
        self._maybe_fail("select_all")
        return sorted(self.rows, key=lambda p: p.created_at, reverse=True)

    async def get(self, product_id: str) -> Optional[Product]:
        self.calls.append(("get", product_id))
        self._maybe_fail("get")
        return next((p for p in self.rows if p.id == product_id), None)

    async def insert(self, data: ProductWrite) -> Product:
        self.calls.append(("insert", data))
        self._maybe_fail("insert")
        newest = max((p.created_at for p in self.rows), default=T0)
        obj = Product(id=str(uuid.uuid4()), created_at=newest + timedelta(seconds=1), **data.model_dump())
        self.rows.append(obj)
        return obj

    async def update(self, product_id: str, data: ProductWrite) -> Optional[Product]:
        self.calls.append(("update", (product_id, data)))
        self._maybe_fail("update")
        for i, p in enumerate(self.rows):
            if p.id == product_id:
                self.rows[i] = Product(id=p.id, created_at=p.created_at, **data.model_dump())
                return self.rows[i]
        return None

    async def delete(self, product_id: str) -> None:
        self.calls.append(("delete", product_id))
        self._maybe_fail("delete")
        self.rows = [p for p in self.rows if p.id != product_id]

    async def aclose(self) -> None:
        self.closed = True

    def ops(self) -> List[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def catalog() -> List[Product]:
    return [
        make_product(name="Widget Pro", category="Tools", created_at=T0 + timedelta(minutes=3)),
        make_product(name="Speaker", category="Audio", created_at=T0 + timedelta(minutes=2)),
        make_product(name="Cable", category="accessories", created_at=T0 + timedelta(minutes=1)),
    ]


@pytest.fixture
def fake_store(catalog: List[Product]) -> FakeStore:
    return FakeStore(catalog)


@pytest.fixture
def sql_store():
    engine = make_engine("sqlite://")
    init_db(engine)
    store = SqlProductStore(engine)
    yield store
    engine.dispose()


@pytest.fixture
def empty_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def client(fake_store: FakeStore):
    """
    TestClient in-process peste un FakeStore. Fără `with`, deci lifespan-ul
    nu rulează și nu construiește store-ul real din configurație.
    """
    from fastapi.testclient import TestClient

    from catalog_admin.main import app

    app.state.store = fake_store
    try:
        yield TestClient(app)
    finally:
        app.state.store = None
        app.dependency_overrides.clear()
