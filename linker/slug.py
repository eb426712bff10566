"""Slug value type: fixed-length opaque identifiers for links.

A slug is exactly ``LENGTH`` characters from the 62-symbol alphanumeric
alphabet. It subclasses ``str`` so it hashes, compares and formats like the
text it wraps, and can be handed straight to SQLAlchemy or used as a
metrics label.

How to Use
===========
**Generate a fresh candidate**::
    slug = Slug.generate()

**Generate from a deterministic source (tests)**::
    slug = Slug.generate(lambda alphabet, size: "a" * size)

**Validate inbound text**::
    try:
        slug = Slug.parse(path_segment)
    except InvalidSlug:
        raise HTTPException(status_code=400)
"""

from collections.abc import Callable

from nanoid import generate

from linker.exceptions import InvalidSlug

__all__ = ["ALPHABET", "LENGTH", "RandomSource", "Slug"]

LENGTH = 10
ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"

_ALPHABET_SET = frozenset(ALPHABET)

# (alphabet, size) -> string of `size` symbols drawn from `alphabet`
RandomSource = Callable[[str, int], str]


class Slug(str):
    __slots__ = ()

    @classmethod
    def generate(cls, random_source: RandomSource | None = None) -> "Slug":
        """Draw ``LENGTH`` symbols uniformly from ``ALPHABET``.

        Uniqueness is not checked here; the store's primary key enforces it.
        """
        source = random_source or generate
        return cls.parse(source(ALPHABET, LENGTH))

    @classmethod
    def parse(cls, text: str) -> "Slug":
        if isinstance(text, cls):
            return text
        if not isinstance(text, str) or len(text) != LENGTH:
            raise InvalidSlug(f"slug must be exactly {LENGTH} characters, got {text!r}")
        if not _ALPHABET_SET.issuperset(text):
            raise InvalidSlug(f"slug must be alphanumeric, got {text!r}")
        return cls(text)

    def __repr__(self) -> str:
        return f"Slug({str.__repr__(self)})"
