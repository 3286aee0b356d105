from __future__ import annotations
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field("dev")
    APP_TITLE: str = "catalog-admin"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Backend de date: "sql" (SQLAlchemy) sau "rest" (DBaaS compatibil PostgREST)
    STORE_BACKEND: Literal["sql", "rest"] = "sql"

    # DB (backend sql)
    DATABASE_URL: str = Field("sqlite:///./catalog.db", description="postgresql+psycopg://appuser:<PASS>@db:5432/appdb")
    DB_ECHO: bool = False
    SQLALCHEMY_CREATE_ALL: bool = False

    # DBaaS (backend rest)
    STORE_URL: Optional[str] = None
    STORE_API_KEY: Optional[str] = None
    STORE_TABLE: str = "products"
    STORE_TIMEOUT_S: float = 10.0

    # Formular
    DEFAULT_CATEGORY: str = "general"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
