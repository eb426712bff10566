"""Bounded in-process cache of resolved slugs.

The cache sits in front of the ``links`` table as a pure accelerator: it may
drop any entry at any time, and it is only ever filled from a confirmed read
or a confirmed commit. Links are never updated or deleted, so an entry can
go missing but never go stale.

Cache-aside Diagram
===================
::
    resolve(slug)
         │
         ▼
    ┌──────────┐  hit   ┌──────────────┐
    │ cache.get├───────►│ RedirectTarget│
    └────┬─────┘        └──────────────┘
         │ miss
         ▼
    ┌──────────┐  row   ┌──────────────┐
    │ store    ├───────►│ cache.insert │
    └──────────┘        └──────────────┘

Classes:
    RedirectTarget:  Immutable cache value (url, hidden).
    LinkCache:  Capability contract any bounded concurrent map can satisfy.
    LRULinkCache:  cachetools LRU map guarded by a lock.
"""

import threading
from dataclasses import dataclass
from typing import Protocol

from cachetools import LRUCache

from linker.slug import Slug

__all__ = ["LRULinkCache", "LinkCache", "RedirectTarget"]


@dataclass(frozen=True, slots=True)
class RedirectTarget:
    url: str
    hidden: bool = False


class LinkCache(Protocol):
    def get(self, slug: Slug) -> RedirectTarget | None: ...

    def insert(self, slug: Slug, target: RedirectTarget) -> None: ...


class LRULinkCache:
    """Least-recently-used slug cache, safe to share between tasks and threads.

    ``cachetools.LRUCache`` reorders entries on every read, so reads take the
    lock too. The critical sections are a dict lookup or assignment and never
    await.
    """

    def __init__(self, max_capacity: int = 1000) -> None:
        if max_capacity <= 0:
            raise ValueError(f"max_capacity must be positive, got {max_capacity!r}")
        self._entries: LRUCache[Slug, RedirectTarget] = LRUCache(maxsize=max_capacity)
        self._lock = threading.Lock()

    @property
    def max_capacity(self) -> int:
        return int(self._entries.maxsize)

    def get(self, slug: Slug) -> RedirectTarget | None:
        with self._lock:
            return self._entries.get(slug)

    def insert(self, slug: Slug, target: RedirectTarget) -> None:
        with self._lock:
            self._entries[slug] = target

    def __contains__(self, slug: object) -> bool:
        with self._lock:
            return slug in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
