"""Shared enums for the link registry.

This module defines all status and label enums used across the codebase.
Using enums instead of string literals provides type safety and prevents typos.
"""

from enum import StrEnum

__all__ = ["Counter", "Handler", "HealthStatus"]


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class Handler(StrEnum):
    """Registry operations, used as the ``handler`` metrics label."""

    RESOLVE = "resolve"
    REVERSE = "reverse"
    CREATE = "create"


class Counter(StrEnum):
    """Counter families recorded by the observability sink."""

    HTTP_REQUESTS = "http_requests"
    CACHE_HITS = "cache_hits"
    CACHE_MISSES = "cache_misses"
