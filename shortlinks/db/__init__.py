"""Database module for the short links application."""
from shortlinks.db.base import DatabaseHealthCheck, async_session_factory, engine, get_engine
from shortlinks.db.session import db_transaction, get_db

__all__ = [
    "engine",
    "get_engine",
    "async_session_factory",
    "DatabaseHealthCheck",
    "get_db",
    "db_transaction",
]
