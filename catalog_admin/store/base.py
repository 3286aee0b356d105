# catalog_admin/store/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from catalog_admin.schemas.product import Product, ProductWrite


class StoreError(Exception):
    """Orice eșec al store-ului (rețea, status != 2xx, eroare DB)."""
    def __init__(self, message: str, status_code: int = 0, payload: Optional[object] = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class ProductStore(ABC):
    """
    Clientul de acces la date pentru tabelul de produse.

    Fiecare operație e un singur apel cu un singur rezultat: fie valoarea,
    fie StoreError. Nu există retry sau tranzacții între apeluri.
    """

    @abstractmethod
    async def select_all(self) -> List[Product]:
        """Toate produsele, cele mai noi primele (created_at desc)."""

    @abstractmethod
    async def get(self, product_id: str) -> Optional[Product]:
        ...

    @abstractmethod
    async def insert(self, data: ProductWrite) -> Product:
        """Inserează; id și created_at sunt atribuite de store."""

    @abstractmethod
    async def update(self, product_id: str, data: ProductWrite) -> Optional[Product]:
        """Înlocuiește câmpurile mutabile; None dacă filtrul nu a prins niciun rând."""

    @abstractmethod
    async def delete(self, product_id: str) -> None:
        ...

    async def ping(self) -> None:
        """Verificare de disponibilitate; implicit un select complet."""
        await self.select_all()

    async def aclose(self) -> None:
        return None
