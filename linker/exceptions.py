"""Error taxonomy for the link registry.

Store-level errors are raised by ``linker.store`` and never leave the
registry; the registry converts them into the user-facing kinds below,
which the routes map onto HTTP status codes.

Exception Hierarchy
===================
::
    LinkerError
    ├─ InvalidSlug (also ValueError)      → 400
    ├─ StoreError                         (internal)
    │  ├─ SlugTaken   (links_pkey)
    │  └─ UrlTaken    (links_url_key)
    ├─ NotFound                           → 404
    ├─ Conflict                           → 409
    └─ Unavailable                        → 503
       └─ PkRaceExhausted
"""

__all__ = [
    "LinkerError",
    "InvalidSlug",
    "StoreError",
    "SlugTaken",
    "UrlTaken",
    "NotFound",
    "Conflict",
    "Unavailable",
    "PkRaceExhausted",
]


class LinkerError(Exception):
    """Generic base class for link registry exceptions."""

    error_code = "linker:error"


class InvalidSlug(LinkerError, ValueError):
    """Raised when text is not a well-formed slug."""

    error_code = "linker:invalid_slug"


class StoreError(LinkerError):
    """Raised when the durable store fails.

    Examples include connection issues, pool timeouts and unexpected
    constraint violations.
    """

    error_code = "store:store_error"


class SlugTaken(StoreError):
    """Raised when an insert collides with an existing slug (primary key)."""

    error_code = "store:slug_taken"


class UrlTaken(StoreError):
    """Raised when an insert collides with an already registered URL."""

    error_code = "store:url_taken"


class NotFound(LinkerError):
    """No link matches the requested slug or URL."""

    error_code = "linker:not_found"


class Conflict(LinkerError):
    """The destination URL is already registered under another slug."""

    error_code = "linker:conflict"


class Unavailable(LinkerError):
    """The store is unreachable or failed unexpectedly."""

    error_code = "linker:unavailable"


class PkRaceExhausted(Unavailable):
    """Every candidate slug collided with an existing one."""

    error_code = "linker:pk_race_exhausted"

    def __init__(self, attempts: int) -> None:
        super().__init__(f"slug collision retries exhausted after {attempts} attempts")
        self.attempts = attempts
