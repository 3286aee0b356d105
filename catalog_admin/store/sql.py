from __future__ import annotations

import logging
from typing import Callable, List, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from catalog_admin.crud import product as crud
from catalog_admin.database import make_session_factory, session_scope
from catalog_admin.schemas.product import Product, ProductWrite
from catalog_admin.store.base import ProductStore, StoreError

logger = logging.getLogger("catalog-admin.store_sql")

T = TypeVar("T")


class SqlProductStore(ProductStore):
    """
    Store peste SQLAlchemy (SQLite/Postgres). Sesiunile sunt sincrone, deci
    fiecare operație rulează în threadpool și are propria unitate de lucru.
    """

    def __init__(self, engine: Engine, session_factory: Optional[sessionmaker] = None):
        self.engine = engine
        self._factory = session_factory or make_session_factory(engine)

    async def _run(self, op: str, fn: Callable[[Session], T]) -> T:
        def _work() -> T:
            with session_scope(self._factory) as db:
                return fn(db)

        try:
            return await run_in_threadpool(_work)
        except SQLAlchemyError as e:
            logger.warning("SQL %s failed: %s", op, e)
            raise StoreError(f"Store {op} failed: {e.__class__.__name__}") from e

    async def select_all(self) -> List[Product]:
        return await self._run(
            "select", lambda db: [Product.model_validate(r) for r in crud.list_products(db)]
        )

    async def get(self, product_id: str) -> Optional[Product]:
        def _get(db: Session) -> Optional[Product]:
            row = crud.get(db, product_id)
            return Product.model_validate(row) if row is not None else None

        return await self._run("get", _get)

    async def insert(self, data: ProductWrite) -> Product:
        return await self._run("insert", lambda db: Product.model_validate(crud.create(db, data)))

    async def update(self, product_id: str, data: ProductWrite) -> Optional[Product]:
        def _update(db: Session) -> Optional[Product]:
            row = crud.update(db, product_id, data)
            return Product.model_validate(row) if row is not None else None

        return await self._run("update", _update)

    async def delete(self, product_id: str) -> None:
        await self._run("delete", lambda db: crud.delete_by_id(db, product_id))

    async def ping(self) -> None:
        await self._run("ping", lambda db: db.execute(text("SELECT 1")).scalar_one())

    async def aclose(self) -> None:
        await run_in_threadpool(self.engine.dispose)
