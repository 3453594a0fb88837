"""Core module for the short links application."""

from shortlinks.core.config import settings

__all__ = ["settings"]
