"""Create products table.

Revision ID: 0001_create_products
Revises:
Create Date: 2026-10-18 10:00:00.000000
"""
from __future__ import annotations

import os
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# --- Alembic identifiers ---
revision: str = "0001_create_products"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCHEMA = (os.getenv("DB_SCHEMA") or "").strip() or None

_json = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "products",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("sale_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("images", _json, nullable=False),
        sa.Column("specifications", _json, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("price >= 0", name=op.f("ck_products_price_nonnegative")),
        sa.CheckConstraint(
            "sale_price IS NULL OR sale_price >= 0", name=op.f("ck_products_sale_price_nonnegative")
        ),
        sa.CheckConstraint("stock >= 0", name=op.f("ck_products_stock_nonnegative")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_products")),
        schema=SCHEMA,
    )
    # listare "cele mai noi întâi"
    op.create_index("ix_products_created_at", "products", ["created_at"], schema=SCHEMA)
    # căutări case-insensitive pe nume
    op.create_index("ix_products_name_lower", "products", [sa.text("lower(name)")], schema=SCHEMA)


def downgrade() -> None:
    op.drop_index("ix_products_name_lower", table_name="products", schema=SCHEMA)
    op.drop_index("ix_products_created_at", table_name="products", schema=SCHEMA)
    op.drop_table("products", schema=SCHEMA)
