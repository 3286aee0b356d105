# catalog_admin/store/__init__.py
from __future__ import annotations

import logging

from catalog_admin.core.settings import Settings
from catalog_admin.store.base import ProductStore, StoreError

logger = logging.getLogger("catalog-admin.store")


def build_store(cfg: Settings) -> ProductStore:
    """
    Construiește store-ul din configurație (STORE_BACKEND=sql|rest).
    Importăm backend-urile târziu ca să nu tragem httpx/SQLAlchemy degeaba.
    """
    if cfg.STORE_BACKEND == "rest":
        from catalog_admin.store.rest import RestProductStore, RestStoreConfig

        if not cfg.STORE_URL or not cfg.STORE_API_KEY:
            raise RuntimeError("STORE_BACKEND=rest cere STORE_URL și STORE_API_KEY.")
        logger.info("Using REST store at %s (table=%s)", cfg.STORE_URL, cfg.STORE_TABLE)
        return RestProductStore(
            RestStoreConfig(
                base_url=cfg.STORE_URL,
                api_key=cfg.STORE_API_KEY,
                table=cfg.STORE_TABLE,
                timeout=cfg.STORE_TIMEOUT_S,
                user_agent=f"{cfg.APP_TITLE}/{cfg.APP_VERSION}",
            )
        )

    from catalog_admin.database import init_db, make_engine, mask_url
    from catalog_admin.store.sql import SqlProductStore

    engine = make_engine(cfg.DATABASE_URL, echo=cfg.DB_ECHO)
    if cfg.SQLALCHEMY_CREATE_ALL:
        init_db(engine)
    logger.info("Using SQL store at %s", mask_url(cfg.DATABASE_URL))
    return SqlProductStore(engine)


__all__ = ("ProductStore", "StoreError", "build_store")
