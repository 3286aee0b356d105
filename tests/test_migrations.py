# tests/test_migrations.py
from __future__ import annotations

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ROOT = Path(__file__).resolve().parents[1]

pytestmark = pytest.mark.timeout(30)


def _alembic_cfg(url: str) -> Config:
    # fără alembic.ini: nu vrem ca fileConfig să reconfigureze logging-ul testelor
    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


def test_upgrade_and_downgrade_on_sqlite(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'catalog.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    cfg = _alembic_cfg(url)

    command.upgrade(cfg, "head")
    engine = create_engine(url)
    try:
        insp = inspect(engine)
        assert "products" in insp.get_table_names()
        cols = {c["name"] for c in insp.get_columns("products")}
        assert cols == {
            "id", "name", "description", "price", "sale_price", "stock",
            "category", "images", "specifications", "created_at", "updated_at",
        }
        indexes = {ix["name"] for ix in insp.get_indexes("products")}
        assert "ix_products_created_at" in indexes

        command.downgrade(cfg, "base")
        assert "products" not in inspect(engine).get_table_names()
    finally:
        engine.dispose()
