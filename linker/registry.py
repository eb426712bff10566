"""Link registry: resolve, reverse lookup and collision-safe creation.

``LinkRegistry`` is the handle every request goes through. It is built once
at startup around a store, a cache and a metrics sink, and shared by all
request tasks; it holds no per-request state and takes no global lock.

Flow Diagram — resolve()
========================
::
    ┌─────────────┐
    │ count       │
    │ request     │
    └──────┬──────┘
           ▼
    ┌─────────────┐  HIT   ┌─────────────┐
    │ cache.get() ├───────►│ count hit,  │
    └──────┬──────┘        │ return      │
           │ MISS          └─────────────┘
           ▼
    ┌─────────────┐
    │ count miss, │
    │ SELECT slug │
    └──────┬──────┘
    ┌──────┴───────┬──────────────┐
    │ row          │ no row       │ store error
    ▼              ▼              ▼
 cache.insert   NotFound     Unavailable
 return target

Flow Diagram — create()
=======================
::
    Generating ──► Inserting ──┬─► Committed ──► cache.insert, return slug
        ▲                      │
        └──── SlugTaken ◄──────┤  (at most max_retries times, then
                               │   PkRaceExhausted)
                               ├─► UrlTaken ──► Conflict
                               └─► StoreError ─► Unavailable

Key Behaviours
===============
- A cache hit never touches the store.
- The cache is only filled from a row that was read back or whose insert
  commit has returned; a not-found result leaves it untouched.
- Every call is counted, whatever its outcome.
- Slug collisions are retried locally with a fresh candidate; everything
  else is surfaced to the caller as a registry error.
"""

import logging
from collections.abc import AsyncIterator

from linker.cache import LinkCache, RedirectTarget
from linker.enums import Counter, Handler
from linker.exceptions import (
    Conflict,
    InvalidSlug,
    NotFound,
    PkRaceExhausted,
    SlugTaken,
    StoreError,
    Unavailable,
    UrlTaken,
)
from linker.metrics import LinkMetrics
from linker.models import Link
from linker.slug import RandomSource, Slug
from linker.store import LinkStore

__all__ = ["DEFAULT_MAX_RETRIES", "LinkRegistry"]

DEFAULT_MAX_RETRIES = 2

logger = logging.getLogger(__name__)


class LinkRegistry:
    """Cache-aside registry of slug → destination links.

    Args:
        store: Durable store holding the ``links`` table.
        cache: Bounded slug cache shared by every request.
        metrics: Sink for request and cache counters.
        max_retries: Extra attempts allowed after a slug collision.
        random_source: ``(alphabet, size) -> str`` used to draw slugs;
            defaults to nanoid's secure generator.
    """

    def __init__(
        self,
        store: LinkStore,
        cache: LinkCache,
        metrics: LinkMetrics,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        random_source: RandomSource | None = None,
    ) -> None:
        if max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {max_retries!r}")
        self.store = store
        self.cache = cache
        self.metrics = metrics
        self.max_retries = max_retries
        self._random_source = random_source

    async def resolve(self, slug: Slug) -> RedirectTarget:
        self.metrics.increment(Counter.HTTP_REQUESTS, Handler.RESOLVE, slug)

        target = self.cache.get(slug)
        if target is not None:
            self.metrics.increment(Counter.CACHE_HITS, Handler.RESOLVE, slug)
            return target
        self.metrics.increment(Counter.CACHE_MISSES, Handler.RESOLVE, slug)

        try:
            link = await self.store.get_by_slug(slug)
        except StoreError as exc:
            logger.error(f"Unable to resolve slug {slug}: {exc}", exc_info=exc)
            raise Unavailable("unable to resolve slug") from exc

        if link is None:
            raise NotFound(f"no link for slug {slug}")

        target = RedirectTarget(url=link.url, hidden=link.hidden)
        self.cache.insert(slug, target)
        return target

    async def reverse_lookup(self, url: str) -> Slug:
        try:
            link = await self.store.get_by_url(url)
        except StoreError as exc:
            self.metrics.increment(Counter.HTTP_REQUESTS, Handler.REVERSE)
            logger.error(f"Unable to reverse lookup {url}: {exc}", exc_info=exc)
            raise Unavailable("unable to reverse lookup") from exc

        if link is None:
            self.metrics.increment(Counter.HTTP_REQUESTS, Handler.REVERSE)
            raise NotFound(f"no link for url {url}")

        try:
            slug = Slug.parse(link.slug)
        except InvalidSlug as exc:
            # Rows are only written with generated slugs.
            self.metrics.increment(Counter.HTTP_REQUESTS, Handler.REVERSE)
            logger.error(f"Malformed slug stored for {url}: {link.slug!r}", exc_info=exc)
            raise Unavailable("malformed slug in store") from exc

        self.metrics.increment(Counter.HTTP_REQUESTS, Handler.REVERSE, slug)
        return slug

    async def create(self, url: str, hidden: bool = False) -> Slug:
        attempts = self.max_retries + 1
        for attempt in range(attempts):
            try:
                slug = Slug.generate(self._random_source)
            except InvalidSlug as exc:
                self.metrics.increment(Counter.HTTP_REQUESTS, Handler.CREATE)
                logger.error(f"Random source produced an invalid slug: {exc}", exc_info=exc)
                raise Unavailable("unable to generate slug") from exc
            try:
                await self.store.insert(slug, url, hidden)
            except SlugTaken:
                logger.debug(f"Slug {slug} already taken, retrying (attempt {attempt + 1}/{attempts})")
                continue
            except UrlTaken as exc:
                self.metrics.increment(Counter.HTTP_REQUESTS, Handler.CREATE)
                raise Conflict(f"url already registered: {url}") from exc
            except StoreError as exc:
                self.metrics.increment(Counter.HTTP_REQUESTS, Handler.CREATE)
                logger.error(f"Unable to create link for {url}: {exc}", exc_info=exc)
                raise Unavailable("unable to create link") from exc

            # Commit confirmed; only now may resolvers see the slug.
            self.cache.insert(slug, RedirectTarget(url=url, hidden=hidden))
            self.metrics.increment(Counter.HTTP_REQUESTS, Handler.CREATE, slug)
            logger.debug(f"Created {slug} -> {url} (hidden={hidden})")
            return slug

        self.metrics.increment(Counter.HTTP_REQUESTS, Handler.CREATE)
        exc = PkRaceExhausted(attempts)
        logger.error(f"Unable to create link for {url}: {exc}")
        raise exc

    def iter_links(self) -> AsyncIterator[Link]:
        return self.store.iter_links()

    async def ping(self) -> None:
        await self.store.ping()
