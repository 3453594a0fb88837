"""Short Links: an owner-scoped URL shortening service."""

__version__ = "0.1.0"
