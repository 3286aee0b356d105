# catalog_admin/database.py
from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import MetaData, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

# -----------------------------
# Helpers
# -----------------------------
def mask_url(url: str) -> str:
    if "://" not in url:
        return url
    scheme, rest = url.split("://", 1)
    if "@" not in rest or ":" not in rest.split("@", 1)[0]:
        return url
    creds, tail = rest.split("@", 1)
    user = creds.split(":", 1)[0]
    return f"{scheme}://{user}:***@{tail}"

# Pe SQLite nu există scheme; gol implicit. Trebuie cunoscut la import (metadata).
DEFAULT_SCHEMA = (os.getenv("DB_SCHEMA") or "").strip() or None

# Pooling
POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "1800"))  # sec (30 min)
POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))    # sec

# -----------------------------
# Naming convention pentru Alembic/op.f()
# -----------------------------
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(schema=DEFAULT_SCHEMA, naming_convention=NAMING_CONVENTION)
Base = declarative_base(metadata=metadata)

# -----------------------------
# Engine factory
# -----------------------------
def _build_engine_kwargs(url: str, echo: bool) -> dict:
    kwargs: dict = {"echo": echo, "pool_pre_ping": True}

    if url.startswith("sqlite"):
        # SQLite: single-thread în driver → dezactivează check_same_thread
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory → StaticPool (altfel fiecare conexiune are DB separat)
        if url in {"sqlite://", "sqlite:///:memory:", "sqlite+pysqlite:///:memory:"}:
            kwargs["poolclass"] = StaticPool
        else:
            kwargs["poolclass"] = NullPool
    else:
        kwargs.update(
            {
                "pool_size": POOL_SIZE,
                "max_overflow": MAX_OVERFLOW,
                "pool_recycle": POOL_RECYCLE,
                "pool_timeout": POOL_TIMEOUT,
            }
        )
    return kwargs

def make_engine(url: str, *, echo: bool = False) -> Engine:
    url = (url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL este gol. Setează o valoare validă.")
    return create_engine(url, **_build_engine_kwargs(url, echo))

def make_session_factory(bind: Engine) -> sessionmaker:
    # expire_on_commit=False → obiectele rămân utilizabile după commit (evită re-load imediat)
    return sessionmaker(bind=bind, autocommit=False, autoflush=False, expire_on_commit=False)

@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Unitate de lucru: commit la final, rollback la excepție.
    Exemplu:
        with session_scope(SessionLocal) as db:
            db.add(obj)
    """
    db: Session = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def init_db(bind: Engine) -> None:
    """Creează tabelele din modele (prototip/teste); în producție folosește Alembic."""
    from catalog_admin.models import product  # noqa: F401
    Base.metadata.create_all(bind=bind)

__all__ = [
    "Base",
    "metadata",
    "make_engine",
    "make_session_factory",
    "session_scope",
    "init_db",
    "mask_url",
]
