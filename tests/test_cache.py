"""Tests for the bounded slug cache."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from linker.cache import LinkCache, LRULinkCache, RedirectTarget
from linker.slug import Slug


def _slug(i: int) -> Slug:
    return Slug.parse(f"{i:010d}")


def test_get_missing_returns_none(cache: LRULinkCache) -> None:
    assert cache.get(_slug(1)) is None
    assert _slug(1) not in cache
    assert len(cache) == 0


def test_insert_then_get(cache: LRULinkCache) -> None:
    target = RedirectTarget(url="https://example.com", hidden=True)
    cache.insert(_slug(1), target)
    assert cache.get(_slug(1)) is target
    assert _slug(1) in cache


def test_insert_replaces_whole_entry(cache: LRULinkCache) -> None:
    cache.insert(_slug(1), RedirectTarget(url="https://a.example"))
    cache.insert(_slug(1), RedirectTarget(url="https://b.example"))
    assert cache.get(_slug(1)) == RedirectTarget(url="https://b.example")
    assert len(cache) == 1


def test_redirect_target_is_immutable() -> None:
    target = RedirectTarget(url="https://example.com")
    with pytest.raises(AttributeError):
        target.url = "https://evil.example"  # type: ignore[misc]
    assert target.hidden is False


def test_capacity_is_bounded() -> None:
    cache = LRULinkCache(max_capacity=3)
    for i in range(10):
        cache.insert(_slug(i), RedirectTarget(url=f"https://example.com/{i}"))
    assert len(cache) == 3
    assert cache.max_capacity == 3


def test_evicts_least_recently_used() -> None:
    cache = LRULinkCache(max_capacity=2)
    cache.insert(_slug(1), RedirectTarget(url="https://example.com/1"))
    cache.insert(_slug(2), RedirectTarget(url="https://example.com/2"))
    # Touch 1 so 2 becomes the eviction candidate.
    assert cache.get(_slug(1)) is not None
    cache.insert(_slug(3), RedirectTarget(url="https://example.com/3"))

    assert _slug(1) in cache
    assert _slug(2) not in cache
    assert _slug(3) in cache


@pytest.mark.parametrize("capacity", [0, -1])
def test_rejects_non_positive_capacity(capacity: int) -> None:
    with pytest.raises(ValueError):
        LRULinkCache(max_capacity=capacity)


def test_concurrent_writers_and_readers() -> None:
    cache = LRULinkCache(max_capacity=50)

    def work(worker: int) -> None:
        for i in range(500):
            slug = _slug(worker * 1000 + i)
            cache.insert(slug, RedirectTarget(url=f"https://example.com/{worker}/{i}"))
            cache.get(slug)
            cache.get(_slug(i))

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(work, range(8)))

    assert len(cache) == 50


def test_satisfies_protocol(cache: LRULinkCache) -> None:
    def use(c: LinkCache) -> RedirectTarget | None:
        c.insert(_slug(7), RedirectTarget(url="https://example.com/7"))
        return c.get(_slug(7))

    assert use(cache) == RedirectTarget(url="https://example.com/7")
