# catalog_admin/routers/products.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from catalog_admin.browser import CatalogBrowser
from catalog_admin.core.settings import Settings, get_settings
from catalog_admin.editor import ProductEditor
from catalog_admin.prompts import never_confirm, always_confirm
from catalog_admin.schemas.product import CatalogView, Product, ProductFormIn
from catalog_admin.store.base import ProductStore

router = APIRouter(prefix="/admin/products", tags=["products"])


def get_store(request: Request) -> ProductStore:
    """Store-ul aplicației (creat în lifespan, suprascris în teste)."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Store not configured")
    return store


def _raise_for_editor(editor: ProductEditor) -> None:
    # erori de validare → 422; eșecul store-ului se propagă ca 502 din handler
    if editor.errors:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=editor.errors)
    if editor.last_error is not None:
        raise editor.last_error


async def _load_or_404(store: ProductStore, product_id: str) -> Product:
    obj = await store.get(product_id)
    if obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return obj


@router.get(
    "",
    response_model=CatalogView,
    summary="List products (newest first) with free-text filtering",
)
async def list_products(
    response: Response,
    q: str = Query(default="", description="Case-insensitive substring of name or category"),
    store: ProductStore = Depends(get_store),
):
    """
    Încarcă tot catalogul și filtrează local după `q` (name sau category).
    Starea (`populated|empty|no_matches`) e cea afișată de listă.
    """
    browser = CatalogBrowser(store)
    if not await browser.load_all():
        raise browser.last_error
    view = browser.view(q)
    response.headers["X-Total-Count"] = str(view.total)
    return view


@router.get(
    "/{product_id}",
    response_model=Product,
    summary="Get a product by id",
)
async def get_product(product_id: str, store: ProductStore = Depends(get_store)):
    return await _load_or_404(store, product_id)


@router.post(
    "",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
async def create_product(
    payload: ProductFormIn,
    store: ProductStore = Depends(get_store),
    cfg: Settings = Depends(get_settings),
):
    editor = ProductEditor(store, default_category=cfg.DEFAULT_CATEGORY)
    editor.fill(payload.model_dump())
    if not await editor.submit():
        _raise_for_editor(editor)
    return editor.saved


@router.put(
    "/{product_id}",
    response_model=Product,
    summary="Update a product (full replacement of mutable fields)",
)
async def update_product(
    product_id: str,
    payload: ProductFormIn,
    store: ProductStore = Depends(get_store),
):
    current = await _load_or_404(store, product_id)
    editor = ProductEditor(store, current)
    editor.fill(payload.model_dump())
    if not await editor.submit():
        _raise_for_editor(editor)
    if editor.saved is None:
        # șters între citire și update
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return editor.saved


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product (requires confirm=true)",
)
async def delete_product(
    product_id: str,
    confirm: bool = Query(default=False, description="Confirmă ștergerea"),
    store: ProductStore = Depends(get_store),
):
    browser = CatalogBrowser(store, confirm=always_confirm if confirm else never_confirm)
    if not await browser.delete(product_id):
        if browser.last_error is not None:
            raise browser.last_error
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Deletion not confirmed")
    return None
