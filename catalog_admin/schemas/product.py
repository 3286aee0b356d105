# catalog_admin/schemas/product.py
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


def _quantize_price(v: Decimal) -> Decimal:
    # Aliniază la NUMERIC(12,2) și evită erori de reprezentare
    return v.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class Product(BaseModel):
    """Înregistrare de produs așa cum o întoarce store-ul."""
    id: str
    name: str
    description: str = ""
    price: Decimal = Decimal("0")
    sale_price: Optional[Decimal] = None
    stock: int = 0
    category: str = ""
    images: List[str] = Field(default_factory=list)
    specifications: Dict[str, str] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("images", mode="before")
    @classmethod
    def _images_none(cls, v):
        return [] if v is None else v

    @field_validator("specifications", mode="before")
    @classmethod
    def _specs_none(cls, v):
        return {} if v is None else v

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # SQLite întoarce timestamp-uri naive; le considerăm UTC
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def on_sale(self) -> bool:
        return bool(self.sale_price)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def effective_price(self) -> Decimal:
        """Prețul afișat: sale_price dacă e setat (și nenul), altfel price."""
        return self.sale_price if self.sale_price else self.price

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cover_image(self) -> Optional[str]:
        return self.images[0] if self.images else None


class ProductWrite(BaseModel):
    """
    Setul complet de câmpuri mutabile trimis la insert/update.
    `id` și `created_at` sunt atribuite de store, deci lipsesc aici.
    """
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    sale_price: Optional[Decimal] = Field(None, ge=0)
    stock: int = Field(..., ge=0)
    category: str = Field(..., min_length=1)
    images: List[str] = Field(default_factory=list)
    specifications: Dict[str, str] = Field(default_factory=dict)
    updated_at: datetime

    # --- Validators ---
    @field_validator("name", "description", "category")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        # doar spații = gol; valoarea se salvează așa cum a fost scrisă
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("price")
    @classmethod
    def _price_quantize(cls, v: Decimal) -> Decimal:
        return _quantize_price(v)

    @field_validator("sale_price", mode="before")
    @classmethod
    def _sale_price_zero_is_none(cls, v):
        # 0 / "" înseamnă "fără reducere" → NULL în store
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        try:
            if Decimal(str(v)) == 0:
                return None
        except InvalidOperation:
            pass  # lăsăm pydantic să raporteze valoarea invalidă
        return v

    @field_validator("sale_price")
    @classmethod
    def _sale_price_quantize(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is None:
            return v
        return _quantize_price(v)


class ProductFormIn(BaseModel):
    """
    Payload-ul formularului admin. Intenționat permisiv: validarea câmpurilor
    obligatorii o face editorul la submit, ca în UI.
    """
    name: str = ""
    description: str = ""
    price: Decimal = Decimal("0")
    sale_price: Optional[Decimal] = None
    stock: int = 0
    category: Optional[str] = None
    images: List[str] = Field(default_factory=list)
    specifications: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "Amplificator audio TPA3116",
                    "description": "2x50W, radiator aluminiu",
                    "price": "129.90",
                    "sale_price": "99.90",
                    "stock": 12,
                    "category": "audio",
                    "images": ["https://cdn.example.com/tpa3116.jpg"],
                    "specifications": {"Putere": "2x50W", "Greutate": "0.4 kg"},
                }
            ]
        }
    )


BrowserStateName = Literal["loading", "empty", "no_matches", "populated"]


class CatalogView(BaseModel):
    """Instantaneu de prezentare pentru listă (stare + produse filtrate)."""
    state: BrowserStateName
    query: str
    total: int
    title: Optional[str] = None
    hint: Optional[str] = None
    items: List[Product]
