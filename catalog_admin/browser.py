from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Set

from catalog_admin.prompts import Confirm, Notify, always_confirm, log_notify, resolve
from catalog_admin.schemas.product import CatalogView, Product
from catalog_admin.store.base import ProductStore, StoreError

logger = logging.getLogger("catalog-admin.browser")

DELETE_CONFIRM_MESSAGE = "Are you sure you want to delete this product?"
DELETE_FAILED_MESSAGE = "Failed to delete product"


class BrowserState(str, Enum):
    LOADING = "loading"
    EMPTY = "empty"
    NO_MATCHES = "no_matches"
    POPULATED = "populated"


# titlu + indicație pentru stările goale
_EMPTY_TEXTS = {
    BrowserState.EMPTY: ("No products yet", "Get started by adding your first product"),
    BrowserState.NO_MATCHES: ("No products found", "Try adjusting your search query"),
}


def matches(product: Product, query: str) -> bool:
    """Substring case-insensitive în name sau category."""
    q = query.lower()
    return q in product.name.lower() or q in product.category.lower()


class CatalogBrowser:
    """
    Lista de produse a panoului admin.

    Ține o copie locală a catalogului; filtrarea e locală, iar ștergerea
    scoate produsul din copia locală fără reîncărcare.
    """

    def __init__(
        self,
        store: ProductStore,
        *,
        confirm: Confirm = always_confirm,
        notify: Notify = log_notify,
    ):
        self.store = store
        self.confirm = confirm
        self.notify = notify
        self.products: List[Product] = []
        self.loading = True
        self.last_error: Optional[StoreError] = None
        self._deleting: Set[str] = set()

    async def load_all(self) -> bool:
        """
        Reîncarcă tot catalogul (created_at desc). La eșec păstrează starea
        anterioară și doar loghează; fără retry.
        """
        try:
            products = await self.store.select_all()
        except StoreError as e:
            self.last_error = e
            logger.exception("Error loading products: %s", e)
            return False
        finally:
            self.loading = False
        self.products = products
        self.last_error = None
        logger.debug("Loaded %d products", len(products))
        return True

    def filter(self, query: str = "") -> List[Product]:
        if not query:
            return list(self.products)
        return [p for p in self.products if matches(p, query)]

    async def delete(self, product_id: str) -> bool:
        """
        Cere confirmare, apoi șterge după id. Returnează True doar dacă
        produsul a fost șters; un delete deja în curs pentru același id e ignorat.
        """
        if product_id in self._deleting:
            logger.info("Delete already in flight for %s; ignoring", product_id)
            return False
        # marcat înainte de confirmare: confirm-ul poate fi async
        self._deleting.add(product_id)
        try:
            if not await resolve(self.confirm(DELETE_CONFIRM_MESSAGE)):
                return False
            await self.store.delete(product_id)
        except StoreError as e:
            self.last_error = e
            logger.exception("Error deleting product %s: %s", product_id, e)
            await resolve(self.notify(DELETE_FAILED_MESSAGE))
            return False
        finally:
            self._deleting.discard(product_id)

        self.products = [p for p in self.products if p.id != product_id]
        return True

    def state(self, query: str = "") -> BrowserState:
        if self.loading:
            return BrowserState.LOADING
        if self.filter(query):
            return BrowserState.POPULATED
        return BrowserState.NO_MATCHES if query else BrowserState.EMPTY

    def view(self, query: str = "") -> CatalogView:
        state = self.state(query)
        items = self.filter(query) if state is BrowserState.POPULATED else []
        title, hint = _EMPTY_TEXTS.get(state, (None, None))
        return CatalogView(
            state=state.value,
            query=query,
            total=len(items),
            title=title,
            hint=hint,
            items=items,
        )
