# catalog_admin/models/product.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, Integer, Numeric, String, Text, func, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from catalog_admin.database import Base

# JSONB pe Postgres, JSON generic în rest (SQLite în teste)
JsonType = JSON().with_variant(JSONB(), "postgresql")


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductRow(Base):
    """
    Tabelul 'products'.

    Note:
    - `id` e generat de store (UUID text) și nu se modifică niciodată.
    - `created_at` e setat la insert; `updated_at` vine de la client la fiecare scriere.
    - `sale_price` e opțional și NU e constrâns să fie < price (doar >= 0).
    - Index pe `created_at` pentru listarea "cele mai noi întâi".
    """
    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_created_at", "created_at"),
        Index("ix_products_name_lower", func.lower(text("name"))),
        CheckConstraint("price >= 0", name="price_nonnegative"),
        CheckConstraint("sale_price IS NULL OR sale_price >= 0", name="sale_price_nonnegative"),
        CheckConstraint("stock >= 0", name="stock_nonnegative"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    sale_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category: Mapped[str] = mapped_column(String, nullable=False)
    images: Mapped[List[str]] = mapped_column(JsonType, nullable=False, default=list)
    specifications: Mapped[Dict[str, str]] = mapped_column(JsonType, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        # scurtează numele în repr pentru loguri mai curate
        name_preview = (self.name[:32] + "…") if self.name and len(self.name) > 33 else self.name
        return f"<ProductRow id={self.id!r} name={name_preview!r} category={self.category!r}>"
