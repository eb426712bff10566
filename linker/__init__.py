"""linker: a URL-shortening link registry."""

__version__ = "1.0.0"
