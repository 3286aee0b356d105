# catalog_admin/crud/product.py
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from catalog_admin.models.product import ProductRow
from catalog_admin.schemas.product import ProductWrite


def list_products(db: Session) -> List[ProductRow]:
    """Toate produsele, cele mai noi primele; tiebreaker pe id pentru stabilitate."""
    stmt = select(ProductRow).order_by(ProductRow.created_at.desc(), ProductRow.id.desc())
    return list(db.execute(stmt).scalars().all())


def get(db: Session, product_id: str) -> Optional[ProductRow]:
    """Returnează produsul după ID (sau None)."""
    return db.get(ProductRow, product_id)


def create(db: Session, data: ProductWrite) -> ProductRow:
    """Creează produsul; id și created_at vin din default-urile modelului."""
    obj = ProductRow(**data.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


def update(db: Session, product_id: str, data: ProductWrite) -> Optional[ProductRow]:
    """
    Înlocuiește toate câmpurile mutabile (nu e patch parțial).
    Returnează None dacă nu există produsul (update fără rânduri afectate).
    """
    obj = get(db, product_id)
    if obj is None:
        return None
    for k, v in data.model_dump().items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj


def delete_by_id(db: Session, product_id: str) -> bool:
    """Șterge produsul după ID. Returnează True dacă s-a șters ceva."""
    res = db.execute(delete(ProductRow).where(ProductRow.id == product_id))
    db.commit()
    return bool(res.rowcount)
