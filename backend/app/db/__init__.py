"""Database package: shared engine and session factory."""

from app.db.base import Base, build_engine, close_db, create_schema, init_db, session_factory_for

__all__ = [
    "Base",
    "build_engine",
    "close_db",
    "create_schema",
    "init_db",
    "session_factory_for",
]
