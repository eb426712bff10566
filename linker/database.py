"""Database engine and session factory for the link registry.

This module provides SQLAlchemy async engine setup, session management,
and database lifecycle operations using PostgreSQL as the backend.

Flow Diagram — Database Lifecycle
=================================
::
    ┌─────────────┐
    │  lifespan   │
    │  startup    │
    └──────┬──────┘
           ▼
    ┌──────────────┐
    │create_engine │
    │(bounded pool)│
    └──────┬───────┘
           ▼
    ┌─────────────┐
    │ init_db()   │
    │ create_all  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ LinkStore   │
    │ one session │
    │ per call    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ close_db()  │
    │ dispose     │
    └─────────────┘

How to Use
===========
**Step 1 — Create the engine on startup**::
    engine = create_engine(settings)
    await init_db(engine)

**Step 2 — Hand a session factory to the store**::
    store = LinkStore(create_session_factory(engine))

**Step 3 — Cleanup on shutdown**::
    await close_db(engine)

Key Behaviours
===============
- The engine is created by the application factory, never at import time.
- Connection pooling is bounded by DATABASE_POOL_SIZE + DATABASE_MAX_OVERFLOW.
- Stale pooled connections are detected with pool_pre_ping.
- Tables are created automatically on application startup.

Classes:
    Base:  SQLAlchemy declarative base for all models.

Functions:
    create_engine():  Builds the async engine from Settings.
    create_session_factory():  Session factory bound to an engine.
    init_db():  Creates all tables on startup.
    close_db():  Disposes the engine on shutdown.
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from linker.config import Settings

__all__ = ["Base", "create_engine", "create_session_factory", "init_db", "close_db"]


class Base(DeclarativeBase):
    pass


def create_engine(settings: Settings) -> AsyncEngine:
    options: dict = {
        "echo": settings.DATABASE_ECHO,
        "pool_pre_ping": True,
    }
    # SQLite picks its own pool class, which rejects sizing arguments.
    if make_url(settings.DATABASE_URL).get_backend_name() != "sqlite":
        options["pool_size"] = settings.DATABASE_POOL_SIZE
        options["max_overflow"] = settings.DATABASE_MAX_OVERFLOW
    return create_async_engine(settings.DATABASE_URL, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    # Registers the links table on Base.metadata.
    from linker import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    await engine.dispose()
