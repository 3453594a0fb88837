"""
Data models for the short links application.

This module imports and exports all SQLModel models used in the application.
"""

from shortlinks.models.link import MAX_LINK_ID, Link, LinkBase, LinkCreate, LinkUpdate

__all__ = [
    "MAX_LINK_ID",
    "Link",
    "LinkBase",
    "LinkCreate",
    "LinkUpdate",
]
