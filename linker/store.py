"""Durable store access for links.

``LinkStore`` is the only code that talks to the database. Every call opens
its own short-lived session from the pooled engine, so concurrent requests
only contend for pool slots. Driver and ORM failures never leave this module
raw: they are translated into ``StoreError`` and its subclasses.

Insert Classification
=====================
::
    INSERT INTO links (slug, url, hidden)
         │
    ┌────┴──────────────┬────────────────────┬──────────────┐
    │ committed         │ links_pkey         │ links_url_key│ anything else
    ▼                   ▼                    ▼              ▼
    Link           SlugTaken            UrlTaken       StoreError

Functions:
    violated_constraint():  Name of the constraint behind an IntegrityError.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from linker.exceptions import SlugTaken, StoreError, UrlTaken
from linker.models import PK_CONSTRAINT, URL_CONSTRAINT, Link

__all__ = ["LinkStore", "violated_constraint"]

# Drivers that do not report constraint names (SQLite) name the column instead.
_CONSTRAINT_MARKERS = {
    PK_CONSTRAINT: (PK_CONSTRAINT, "links.slug"),
    URL_CONSTRAINT: (URL_CONSTRAINT, "links.url"),
}


def violated_constraint(exc: IntegrityError) -> str | None:
    orig = exc.orig
    # asyncpg errors arrive wrapped in SQLAlchemy's DBAPI adapter.
    for candidate in (orig, getattr(orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return name

    message = str(orig)
    for constraint, markers in _CONSTRAINT_MARKERS.items():
        if any(marker in message for marker in markers):
            return constraint
    return None


@asynccontextmanager
async def _translate_errors(action: str) -> AsyncIterator[None]:
    try:
        yield
    except IntegrityError as exc:
        constraint = violated_constraint(exc)
        if constraint == PK_CONSTRAINT:
            raise SlugTaken(f"unable to {action}: slug already exists") from exc
        if constraint == URL_CONSTRAINT:
            raise UrlTaken(f"unable to {action}: url already registered") from exc
        raise StoreError(f"unable to {action}: {exc}") from exc
    except (SQLAlchemyError, OSError) as exc:
        raise StoreError(f"unable to {action}: {exc}") from exc


class LinkStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_slug(self, slug: str) -> Link | None:
        async with _translate_errors("resolve slug"), self._session_factory() as session:
            result = await session.execute(select(Link).where(Link.slug == slug))
            return result.scalar_one_or_none()

    async def get_by_url(self, url: str) -> Link | None:
        async with _translate_errors("reverse lookup"), self._session_factory() as session:
            result = await session.execute(select(Link).where(Link.url == url))
            return result.scalar_one_or_none()

    async def insert(self, slug: str, url: str, hidden: bool = False) -> Link:
        """Insert one link in its own transaction.

        Returns only after the commit is confirmed. Raises ``SlugTaken`` or
        ``UrlTaken`` depending on which unique constraint fired.
        """
        link = Link(slug=str(slug), url=url, hidden=hidden)
        async with _translate_errors("insert link"), self._session_factory.begin() as session:
            session.add(link)
        return link

    async def iter_links(self) -> AsyncIterator[Link]:
        async with _translate_errors("list links"), self._session_factory() as session:
            rows = await session.stream_scalars(select(Link).order_by(Link.slug))
            async for link in rows:
                yield link

    async def ping(self) -> None:
        async with _translate_errors("ping database"), self._session_factory() as session:
            await session.execute(text("SELECT 1"))
