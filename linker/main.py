"""FastAPI application entry point for the link registry.

Application Lifecycle Diagram
=============================
::
    ┌─────────────┐
    │ create_app()│
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Add CORS    │
    │ middleware  │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ Include     │
    │ routes      │
    └──────┬──────┘
           ▼
    ┌───────────────────┐
    │ lifespan() startup│
    │ AppContext.create │
    │ (engine, tables,  │
    │  cache, metrics)  │
    └──────┬────────────┘
           ▼
    ┌─────────────┐
    │ Serve HTTP  │
    │ requests    │
    └──────┬──────┘
           ▼
    ┌─────────────┐
    │ lifespan()  │
    │ shutdown:   │
    │ dispose pool│
    └─────────────┘

How to Use
===========
**Step 1 — Run**::
    LISTEN_ADDR=0.0.0.0:8080 DATABASE_URL=postgresql+asyncpg://... python -m linker

**Step 2 — Make API calls**::
    curl -X POST http://localhost:8080/reg -d url=https://example.com
    curl -i http://localhost:8080/<slug>
    curl http://localhost:8080/rev/https://example.com
    curl http://localhost:8080/admin/metrics

Key Behaviours
===============
- All shared state is created inside the lifespan and kept on app.state.
- CORS is permissive; the registry sits behind a gateway that owns auth.
- HTTP-level metrics are exposed at /metrics, registry counters at
  /admin/metrics.
"""

__all__ = ["app", "create_app"]

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from linker.config import Settings, get_settings
from linker.dependencies import AppContext
from linker.log import setup_logging
from linker.routes import router
from linker.slug import RandomSource

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, random_source: RandomSource | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(settings.LOG_LEVEL)
        logger.debug(f"Connecting to {settings.masked_database_url}")
        app.state.context = await AppContext.create(settings, random_source=random_source)
        logger.info(f"{settings.APP_NAME} ready ({settings.APP_ENV})")
        yield
        await app.state.context.cleanup()

    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Link registry: short slugs to destination URLs",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=False,
        should_respect_env_var=False,
    ).instrument(app).expose(app, include_in_schema=False)

    app.include_router(router)
    return app


app = create_app()
