from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from catalog_admin.prompts import Notify, log_notify, resolve
from catalog_admin.schemas.product import Product, ProductWrite
from catalog_admin.store.base import ProductStore, StoreError

logger = logging.getLogger("catalog-admin.editor")

SAVE_FAILED_MESSAGE = "Failed to save product"
DEFAULT_CATEGORY = "general"

OnClose = Callable[[], Union[None, Awaitable[None]]]
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _numeric(v: Any) -> Any:
    # câmp numeric gol → 0, ca un <input type="number"> necompletat
    if v is None or (isinstance(v, str) and not v.strip()):
        return 0
    return v


@dataclass
class ProductForm:
    """Valorile brute din formular, înainte de validare/coerciție."""
    name: str = ""
    description: str = ""
    price: Any = 0
    sale_price: Any = 0
    stock: Any = 0
    category: str = DEFAULT_CATEGORY
    images: List[str] = field(default_factory=list)
    specifications: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_product(cls, product: Product) -> "ProductForm":
        return cls(
            name=product.name,
            description=product.description,
            price=product.price,
            sale_price=product.sale_price or 0,
            stock=product.stock,
            category=product.category or DEFAULT_CATEGORY,
            images=list(product.images),
            specifications=dict(product.specifications),
        )


class ProductEditor:
    """
    Formularul de creare/editare produs.

    Inițializat cu un produs existent (editare) sau fără (creare, valori
    implicite). Listele de imagini și specificații se editează local;
    doar `submit()` ajunge la store.
    """

    def __init__(
        self,
        store: ProductStore,
        product: Optional[Product] = None,
        *,
        on_close: Optional[OnClose] = None,
        notify: Notify = log_notify,
        clock: Clock = utcnow,
        default_category: str = DEFAULT_CATEGORY,
    ):
        self.store = store
        self.product = product
        self.on_close = on_close
        self.notify = notify
        self.clock = clock
        if product is not None:
            self.form = ProductForm.from_product(product)
        else:
            self.form = ProductForm(category=default_category)
        self.loading = False
        self.errors: Dict[str, str] = {}
        self.last_error: Optional[StoreError] = None
        self.saved: Optional[Product] = None

    # --- prezentare ---

    @property
    def is_edit(self) -> bool:
        return self.product is not None

    @property
    def title(self) -> str:
        return "Edit Product" if self.is_edit else "Add New Product"

    @property
    def submit_label(self) -> str:
        if self.loading:
            return "Saving..."
        return "Update Product" if self.is_edit else "Create Product"

    # --- câmpuri ---

    def fill(self, data: Mapping[str, Any]) -> None:
        """
        Atribuie câmpurile din `data`. Imaginile și specificațiile înlocuiesc
        complet valorile curente, trecând prin add_image/add_specification.
        """
        for key in ("name", "description", "price", "stock", "category"):
            if key in data and data[key] is not None:
                setattr(self.form, key, data[key])
        if "sale_price" in data:
            # None = fără reducere
            self.form.sale_price = data["sale_price"] or 0
        if "images" in data:
            self.form.images = []
            for url in data["images"] or []:
                self.add_image(url)
        if "specifications" in data:
            self.form.specifications = {}
            for k, v in (data["specifications"] or {}).items():
                self.add_specification(k, v)

    def add_image(self, url: str) -> None:
        url = (url or "").strip()
        if url:
            self.form.images.append(url)

    def remove_image(self, index: int) -> None:
        if 0 <= index < len(self.form.images):
            del self.form.images[index]

    def add_specification(self, key: str, value: str) -> None:
        key, value = (key or "").strip(), (value or "").strip()
        if key and value:
            self.form.specifications[key] = value

    def remove_specification(self, key: str) -> None:
        self.form.specifications.pop(key, None)

    # --- submit ---

    def _next_updated_at(self) -> datetime:
        now = self.clock()
        prev = self.product.updated_at if self.product is not None else None
        # ceasul poate sta pe loc sau da înapoi; updated_at trebuie să crească strict
        if prev is not None and now <= prev:
            now = prev + timedelta(microseconds=1)
        return now

    def build_payload(self) -> ProductWrite:
        """Validează și convertește formularul; ridică ValidationError."""
        f = self.form
        return ProductWrite(
            name=f.name,
            description=f.description,
            price=_numeric(f.price),
            sale_price=f.sale_price,
            stock=_numeric(f.stock),
            category=f.category,
            images=list(f.images),
            specifications=dict(f.specifications),
            updated_at=self._next_updated_at(),
        )

    async def submit(self) -> bool:
        if self.loading:
            logger.info("Submit already in flight; ignoring")
            return False

        try:
            payload = self.build_payload()
        except ValidationError as e:
            self.errors = {str(err["loc"][0]): err["msg"] for err in e.errors() if err.get("loc")}
            logger.info("Product form invalid: %s", sorted(self.errors))
            await resolve(self.notify(f"Please check the following fields: {', '.join(sorted(self.errors))}"))
            return False
        self.errors = {}

        self.loading = True
        try:
            if self.product is not None:
                self.saved = await self.store.update(self.product.id, payload)
            else:
                self.saved = await self.store.insert(payload)
        except StoreError as e:
            self.last_error = e
            logger.exception("Error saving product: %s", e)
            await resolve(self.notify(SAVE_FAILED_MESSAGE))
            return False
        finally:
            self.loading = False

        self.last_error = None
        logger.info(
            "Product %s %s",
            self.product.id if self.product is not None else (self.saved.id if self.saved else "?"),
            "updated" if self.is_edit else "created",
        )
        await self._close()
        return True

    async def cancel(self) -> None:
        await self._close()

    async def _close(self) -> None:
        if self.on_close is not None:
            await resolve(self.on_close())
