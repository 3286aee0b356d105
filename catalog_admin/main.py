# catalog_admin/main.py
from __future__ import annotations

import os
import time
import uuid
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from catalog_admin.core.logging import setup_logging
from catalog_admin.core.settings import settings
from catalog_admin.routers.products import get_store, router as products_router
from catalog_admin.store import StoreError, build_store

APP_STARTED_MONO = time.monotonic()
APP_STARTED_TS = int(time.time())

# --- Logging ---
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger("catalog-admin")

tags_metadata = [
    {"name": "health", "description": "Liveness/Readiness checks"},
    {"name": "products", "description": "Product catalog admin: list, search, create, edit, delete"},
]

def _get_req_id_from_headers(request: Request) -> str:
    # Prefer X-Request-ID, apoi X-Correlation-ID; dacă lipsesc, generează unul.
    return (
        request.headers.get("x-request-id")
        or request.headers.get("x-correlation-id")
        or uuid.uuid4().hex[:12]
    )

def _req_id(request: Request) -> str:
    # id-ul fixat de middleware, ca handler-ele să întoarcă același header
    return getattr(request.state, "request_id", None) or _get_req_id_from_headers(request)

# --- Middleware func (registered after app is created) ---
async def request_context_mw(request: Request, call_next):
    """
    - Generează/propagă X-Request-ID
    - Aplică headers de securitate minime
    - X-Process-Time
    """
    req_id = _get_req_id_from_headers(request)
    request.state.request_id = req_id

    start = time.perf_counter()
    response: Response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000

    response.headers.setdefault("X-Request-ID", req_id)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Cache-Control", "no-store")
    response.headers.setdefault("X-App-Version", settings.APP_VERSION)
    response.headers.setdefault("X-Process-Time", f"{duration_ms:.1f}ms")
    return response

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: store-ul poate fi deja injectat (teste/embedding)
    owns_store = getattr(app.state, "store", None) is None
    if owns_store:
        app.state.store = build_store(settings)
    try:
        await app.state.store.ping()
        logger.info("Store startup check OK (backend=%s)", settings.STORE_BACKEND)
    except StoreError:
        logger.exception("Store startup check FAILED")

    yield

    # Shutdown: închidem doar ce am creat noi
    if owns_store:
        try:
            await app.state.store.aclose()
        except Exception as e:  # pragma: no cover
            logger.warning("While closing store on shutdown: %s", e)
        app.state.store = None

# --- App factory (create app BEFORE registering middleware) ---
app = FastAPI(
    title=settings.APP_TITLE,
    version=settings.APP_VERSION,
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Register middleware now that app exists
app.middleware("http")(request_context_mw)
app.add_middleware(GZipMiddleware, minimum_size=1024)

# CORS din env: CORS_ORIGINS="http://localhost:5173,https://admin.example.com"
_cors = os.getenv("CORS_ORIGINS")
if _cors:
    origins = [o.strip() for o in _cors.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count", "X-Request-ID", "X-Process-Time", "X-App-Version"],
    )

# --- Exception handlers ---
def _jsonable_errors(exc: RequestValidationError) -> list:
    # ctx poate conține excepții (ValueError) care nu sunt serializabile JSON
    out = []
    for err in exc.errors():
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        out.append(err)
    return out

@app.exception_handler(StoreError)
async def _store_error_handler(request: Request, exc: StoreError):
    # o singură cale de eșec: store indisponibil sau a refuzat cererea
    logger.warning("Store error on %s %s: %s", request.method, request.url.path, exc)
    content = {"detail": str(exc)}
    if exc.status_code:
        content["store_status"] = exc.status_code
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=content,
        headers={"X-Request-ID": _req_id(request)},
    )

@app.exception_handler(RequestValidationError)
async def _validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": _jsonable_errors(exc)},
        headers={"X-Request-ID": _req_id(request)},
    )

# Prinde 404/405 Starlette și răspunde JSON unitar
@app.exception_handler(StarletteHTTPException)
async def _starlette_http_exc_handler(request: Request, exc: StarletteHTTPException):
    headers = dict(exc.headers or {})
    headers.setdefault("X-Request-ID", _req_id(request))
    detail = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND and detail == "Not Found":
        detail = {"message": "Not Found", "path": str(request.url.path)}
    elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        detail = {"message": "Method Not Allowed", "path": str(request.url.path)}
    return JSONResponse(status_code=exc.status_code, content={"detail": detail}, headers=headers)

@app.exception_handler(HTTPException)
async def _http_exc_handler(request: Request, exc: HTTPException):
    headers = dict(exc.headers or {})
    headers.setdefault("X-Request-ID", _req_id(request))
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)

@app.exception_handler(Exception)
async def _unhandled_exc_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
        headers={"X-Request-ID": _req_id(request)},
    )

# --- Routes: health ---
@app.get("/", tags=["health"])
def root():
    return {"name": settings.APP_TITLE, "version": settings.APP_VERSION}

@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}

@app.get("/health/uptime", tags=["health"])
def health_uptime():
    return {"uptime_seconds": round(time.monotonic() - APP_STARTED_MONO, 3), "started_at": APP_STARTED_TS}

@app.get("/health/store", tags=["health"])
async def health_store(request: Request):
    store = get_store(request)
    try:
        await store.ping()
    except StoreError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Store not ready")
    return {"status": "ok", "store": "up", "backend": type(store).__name__}

# --- Routers ---
app.include_router(products_router)
