"""Prometheus counters for registry operations.

Each ``LinkMetrics`` owns its own ``CollectorRegistry`` so that separate
registries (one per app, one per test) never share counter state.

Counter Families
================
::
    linker_http_requests_total{handler, slug}   every registry call
    linker_cache_hits_total{handler, slug}      resolve served from cache
    linker_cache_misses_total{handler, slug}    resolve fell through to store

Recording is best-effort: a failure inside prometheus_client is logged and
never propagates into the request that triggered it.
"""

import logging

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from prometheus_client import Counter as PromCounter

from linker.enums import Counter, Handler

__all__ = ["LinkMetrics"]

logger = logging.getLogger(__name__)

_LABELS = ("handler", "slug")

_DESCRIPTIONS = {
    Counter.HTTP_REQUESTS: "Number of handled registry requests",
    Counter.CACHE_HITS: "Amount of cache hits",
    Counter.CACHE_MISSES: "Amount of cache misses",
}


class LinkMetrics:
    content_type = CONTENT_TYPE_LATEST

    def __init__(self, namespace: str = "linker") -> None:
        self.registry = CollectorRegistry(auto_describe=True)
        self._names = {counter: f"{namespace}_{counter.value}" for counter in _DESCRIPTIONS}
        self._counters = {
            counter: PromCounter(
                counter.value,
                description,
                _LABELS,
                namespace=namespace,
                registry=self.registry,
            )
            for counter, description in _DESCRIPTIONS.items()
        }

    def increment(self, counter: Counter, handler: Handler, slug: str | None = None) -> None:
        try:
            self._counters[counter].labels(handler=handler.value, slug=slug or "").inc()
        except Exception:
            logger.warning("Unable to record %s for %s", counter.value, handler.value, exc_info=True)

    def value(self, counter: Counter, handler: Handler, slug: str | None = None) -> float:
        """Current value of one labeled counter, 0.0 if never incremented."""
        sample = self.registry.get_sample_value(
            f"{self._names[counter]}_total",
            {"handler": handler.value, "slug": slug or ""},
        )
        return sample or 0.0

    def render(self) -> bytes:
        return generate_latest(self.registry)
