"""Shared pytest fixtures: settings, stores, registries and an API client.

API and store tests run against a throwaway SQLite file through aiosqlite,
which reports the same constraint violations the registry relies on.
Registry tests use ``FakeLinkStore`` so concurrency and failure paths can be
driven deterministically.
"""

import asyncio
import itertools
from collections.abc import AsyncGenerator, Iterable
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from linker.cache import LRULinkCache
from linker.config import Settings
from linker.dependencies import AppContext
from linker.exceptions import SlugTaken, StoreError, UrlTaken
from linker.main import create_app
from linker.metrics import LinkMetrics
from linker.models import Link
from linker.registry import LinkRegistry
from linker.slug import RandomSource


class FakeLinkStore:
    """In-memory stand-in for LinkStore with the same error contract.

    Every call yields to the event loop before touching state, so concurrent
    callers interleave the way they would around real database round-trips.
    """

    def __init__(self) -> None:
        self.rows: dict[str, Link] = {}
        self.calls: list[tuple[str, str]] = []
        self.error: StoreError | None = None

    def _check(self) -> None:
        if self.error is not None:
            raise self.error

    async def get_by_slug(self, slug: str) -> Link | None:
        self.calls.append(("get_by_slug", slug))
        await asyncio.sleep(0)
        self._check()
        return self.rows.get(slug)

    async def get_by_url(self, url: str) -> Link | None:
        self.calls.append(("get_by_url", url))
        await asyncio.sleep(0)
        self._check()
        return next((link for link in self.rows.values() if link.url == url), None)

    async def insert(self, slug: str, url: str, hidden: bool = False) -> Link:
        self.calls.append(("insert", slug))
        await asyncio.sleep(0)
        self._check()
        if slug in self.rows:
            raise SlugTaken("slug already exists")
        if any(link.url == url for link in self.rows.values()):
            raise UrlTaken("url already registered")
        link = Link(slug=str(slug), url=url, hidden=hidden)
        self.rows[slug] = link
        return link

    async def iter_links(self):
        self._check()
        for slug in sorted(self.rows):
            yield self.rows[slug]

    async def ping(self) -> None:
        self._check()


def sequence_source(slugs: Iterable[str]) -> RandomSource:
    """Random source that hands out the given slugs in order."""
    it = iter(slugs)
    return lambda alphabet, size: next(it)


def cycle_source(slugs: Iterable[str]) -> RandomSource:
    it = itertools.cycle(slugs)
    return lambda alphabet, size: next(it)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'links.db'}",
        CACHE_MAX_CAPACITY=100,
        CREATE_MAX_RETRIES=2,
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
def fake_store() -> FakeLinkStore:
    return FakeLinkStore()


@pytest.fixture
def cache() -> LRULinkCache:
    return LRULinkCache(max_capacity=100)


@pytest.fixture
def metrics() -> LinkMetrics:
    return LinkMetrics()


@pytest.fixture
def registry(fake_store: FakeLinkStore, cache: LRULinkCache, metrics: LinkMetrics) -> LinkRegistry:
    return LinkRegistry(store=fake_store, cache=cache, metrics=metrics, max_retries=2)


@pytest_asyncio.fixture
async def app_context(settings: Settings) -> AsyncGenerator[AppContext, None]:
    ctx = await AppContext.create(settings)
    yield ctx
    await ctx.cleanup()


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    application = create_app(settings)
    # ASGITransport does not send lifespan events; drive them here.
    async with application.router.lifespan_context(application):
        yield application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
