"""Application context and FastAPI dependency injection.

Shared resources (engine, cache, metrics) live on one ``AppContext`` built in
the application lifespan and stored on ``app.state``. Routes never reach for
module-level singletons; they receive the context, or the registry inside
it, through ``Depends``.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine

from linker.cache import LRULinkCache
from linker.config import Settings
from linker.database import close_db, create_engine, create_session_factory, init_db
from linker.log import LOGGER_NAME
from linker.metrics import LinkMetrics
from linker.registry import LinkRegistry
from linker.slug import RandomSource
from linker.store import LinkStore

__all__ = [
    "AppContext",
    "RequestContext",
    "get_app_context",
    "get_registry",
    "get_request_context",
]


# ============================================================================
# APPLICATION CONTEXT
# ============================================================================


@dataclass
class AppContext:
    """Resources shared by every request, created once per application.

    Attributes:
        settings: Settings the application was built with
        engine: Async engine owning the connection pool
        registry: Link registry (store + cache + metrics)
    """

    settings: Settings
    engine: AsyncEngine
    registry: LinkRegistry

    @classmethod
    async def create(cls, settings: Settings, random_source: RandomSource | None = None) -> "AppContext":
        engine = create_engine(settings)
        await init_db(engine)
        registry = LinkRegistry(
            store=LinkStore(create_session_factory(engine)),
            cache=LRULinkCache(max_capacity=settings.CACHE_MAX_CAPACITY),
            metrics=LinkMetrics(),
            max_retries=settings.CREATE_MAX_RETRIES,
            random_source=random_source,
        )
        return cls(settings=settings, engine=engine, registry=registry)

    async def cleanup(self) -> None:
        await close_db(self.engine)


# ============================================================================
# REQUEST CONTEXT
# ============================================================================


@dataclass
class RequestContext:
    """Per-request tracking data plus access to the shared context.

    Attributes:
        app: Shared application context
        request_id: Unique identifier for this request
        user_agent: Client user agent string
        client_ip: Client IP address
        start_time: Request start timestamp
    """

    app: AppContext
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    user_agent: str | None = None
    client_ip: str | None = None
    start_time: float = field(default_factory=time.time)

    @property
    def registry(self) -> LinkRegistry:
        return self.app.registry

    @property
    def settings(self) -> Settings:
        return self.app.settings

    @property
    def logger(self) -> logging.LoggerAdapter:
        """Request-scoped logger carrying the request id and client address."""
        return logging.LoggerAdapter(
            logging.getLogger(f"{LOGGER_NAME}.http"),
            {
                "request_id": self.request_id,
                "client_ip": self.client_ip,
                "user_agent": self.user_agent,
            },
        )

    def get_duration(self) -> float:
        """Get request duration in milliseconds."""
        return (time.time() - self.start_time) * 1000


# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


def get_app_context(request: Request) -> AppContext:
    return request.app.state.context


def get_registry(ctx: AppContext = Depends(get_app_context)) -> LinkRegistry:
    return ctx.registry


def get_request_context(
    request: Request,
    app_ctx: AppContext = Depends(get_app_context),
) -> RequestContext:
    return RequestContext(
        app=app_ctx,
        request_id=request.headers.get("x-request-id") or str(uuid.uuid4()),
        user_agent=request.headers.get("user-agent"),
        client_ip=request.client.host if request.client else None,
    )
