from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from catalog_admin.schemas.product import Product, ProductWrite
from catalog_admin.store.base import ProductStore, StoreError

# NOTE: ținem logurile concise (nu logăm body-uri complete)
logger_http = logging.getLogger("catalog-admin.store_http")

# =========================
# Config
# =========================

@dataclass(frozen=True)
class RestStoreConfig:
    base_url: str               # ex. https://<proiect>.supabase.co
    api_key: str
    table: str = "products"
    timeout: float = 10.0
    user_agent: str = "catalog-admin"

# =========================
# Helpers
# =========================

def _normalize_base_url(url: str) -> str:
    # trailing slash, ca join-ul cu 'rest/v1/<tabel>' (fără leading slash) să păstreze prefixul
    return url.rstrip("/") + "/"


def _safe_json(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except Exception:
        # unele răspunsuri de eroare pot fi text/html
        return {"raw": resp.text, "status": resp.status_code}


def _extract_error_details(payload: Any) -> Any:
    """Păstrează doar câmpurile de eroare PostgREST (message/details/hint/code)."""
    if not isinstance(payload, dict):
        return payload
    details = {k: payload[k] for k in ("message", "details", "hint", "code") if payload.get(k)}
    return details or payload


def _eq(value: str) -> str:
    # filtrul PostgREST: coloana=eq.<valoare>
    return f"eq.{value}"

# =========================
# Client
# =========================

class RestProductStore(ProductStore):
    """
    Store peste un DBaaS compatibil PostgREST (ex. Supabase).
    - Auth: header `apikey` + `Authorization: Bearer <key>` pe fiecare cerere.
    - Scrieri cu `Prefer: return=representation` ca să primim rândul salvat.
    - Fără retry: orice eroare de rețea sau status != 2xx devine StoreError.
    """

    def __init__(self, cfg: RestStoreConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cfg = cfg
        self._path = f"rest/v1/{cfg.table}"
        self._client = httpx.AsyncClient(
            base_url=_normalize_base_url(cfg.base_url),
            timeout=httpx.Timeout(cfg.timeout),
            headers=self._build_base_headers(cfg),
            transport=transport,
        )

    # --- context manager async ---
    async def __aenter__(self) -> "RestProductStore":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- helpers ---

    def _build_base_headers(self, cfg: RestStoreConfig) -> Dict[str, str]:
        return {
            "apikey": cfg.api_key,
            "Authorization": f"Bearer {cfg.api_key}",
            "Accept": "application/json",
            "User-Agent": cfg.user_agent,
        }

    async def _request(
        self,
        method: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        headers = {"Prefer": prefer} if prefer else None
        started = time.perf_counter()
        try:
            resp = await self._client.request(method, self._path, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger_http.warning("%s %s failed: %s", method, self._path, e)
            raise StoreError(f"Store request failed: {e}") from e
        elapsed_ms = (time.perf_counter() - started) * 1000.0

        log_msg = f"{method} {self._path} -> {resp.status_code} in {elapsed_ms:.1f}ms"
        if resp.status_code >= 400:
            logger_http.warning(log_msg)
            raise StoreError(
                f"Store error {resp.status_code} on {method} {self.cfg.table}",
                status_code=resp.status_code,
                payload=_extract_error_details(_safe_json(resp)),
            )
        logger_http.debug(log_msg)

        # 204 No Content -> succes "gol"
        if resp.status_code == 204 or not resp.content:
            return None
        return _safe_json(resp)

    @staticmethod
    def _rows(payload: Any) -> List[Dict[str, Any]]:
        if payload is None:
            return []
        if isinstance(payload, dict):
            return [payload]
        if isinstance(payload, list):
            return payload
        raise StoreError("Unexpected store payload", payload=payload)

    @staticmethod
    def _parse(row: Any) -> Product:
        # rând care nu respectă modelul (ex. description null) → tot StoreError
        try:
            return Product.model_validate(row)
        except ValidationError as e:
            raise StoreError("Unexpected store payload", payload=row) from e

    @staticmethod
    def _body(data: ProductWrite) -> Dict[str, Any]:
        # mode="json": Decimal -> str, datetime -> ISO 8601; sale_price None -> null
        return data.model_dump(mode="json")

    # ====== operații ======

    async def select_all(self) -> List[Product]:
        payload = await self._request("GET", params={"select": "*", "order": "created_at.desc"})
        return [self._parse(r) for r in self._rows(payload)]

    async def get(self, product_id: str) -> Optional[Product]:
        payload = await self._request("GET", params={"select": "*", "id": _eq(product_id)})
        rows = self._rows(payload)
        return self._parse(rows[0]) if rows else None

    async def insert(self, data: ProductWrite) -> Product:
        payload = await self._request("POST", json=[self._body(data)], prefer="return=representation")
        rows = self._rows(payload)
        if not rows:
            raise StoreError("Insert returned no representation", payload=payload)
        return self._parse(rows[0])

    async def update(self, product_id: str, data: ProductWrite) -> Optional[Product]:
        payload = await self._request(
            "PATCH",
            params={"id": _eq(product_id)},
            json=self._body(data),
            prefer="return=representation",
        )
        rows = self._rows(payload)
        return self._parse(rows[0]) if rows else None

    async def delete(self, product_id: str) -> None:
        await self._request("DELETE", params={"id": _eq(product_id)})

    async def ping(self) -> None:
        await self._request("GET", params={"select": "id", "limit": "1"})
