"""Configuration management for the link registry.

This module provides centralized configuration management using Pydantic BaseSettings
with environment variable support and caching for performance.

Flow Diagram — get_settings()
=============================
::
    ┌─────────────┐
    │  Call get_  │
    │  settings() │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Check cache │
    │ (lru_cache) │
    └──────┬──────┘
    HIT?   │
    ┌──────┴─────┐
    │ NO         │ YES
    ▼            ▼
┌─────────┐  ┌─────────┐
│ Create  │  │ Return  │
│ Settings│  │ cached  │
│ instance│  │ value   │
└─────────┘  └─────────┘

How to Use
===========
**Step 1 — Import**::
    from linker.config import get_settings

**Step 2 — Get settings**::
    settings = get_settings()
    db_url = settings.DATABASE_URL

**Step 3 — Build an app with explicit settings (tests)**::
    app = create_app(Settings(DATABASE_URL="sqlite+aiosqlite:///links.db"))

Key Behaviours
===============
- Settings are cached after first access for performance.
- Environment variables override defaults automatically.
- LISTEN_ADDR and DATABASE_URL are the only inputs a deployment must set.

Classes:
    Settings:  Pydantic model for all configuration values.

"""

__all__ = ["Settings", "get_settings"]

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url


class Settings(BaseSettings):
    APP_NAME: str = "linker"
    APP_ENV: str = "development"
    LISTEN_ADDR: str = "0.0.0.0:8080"

    # PostgreSQL
    DATABASE_URL: str = "postgresql+asyncpg://linker:linker@db:5432/linker"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 5
    DATABASE_ECHO: bool = False

    # In-process slug cache
    CACHE_MAX_CAPACITY: int = 1000

    # Retries after a slug primary-key collision (attempts = retries + 1)
    CREATE_MAX_RETRIES: int = 2

    LOG_LEVEL: str = "DEBUG"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    @property
    def listen_host(self) -> str:
        host, _, _ = self.LISTEN_ADDR.rpartition(":")
        return host.strip("[]") or "0.0.0.0"

    @property
    def listen_port(self) -> int:
        _, _, port = self.LISTEN_ADDR.rpartition(":")
        return int(port)

    @property
    def masked_database_url(self) -> str:
        """DATABASE_URL with the password hidden, safe to log."""
        return make_url(self.DATABASE_URL).render_as_string(hide_password=True)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
