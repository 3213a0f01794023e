"""Storage backends behind one Protocol, selected at startup."""

from app.core.config import Settings
from app.storage.base import Storage
from app.storage.database import DatabaseStorage
from app.storage.memory import MemStorage

BACKENDS = {"memory", "database"}


async def build_storage(settings: Settings) -> Storage:
    """Create the backend named by ``settings.storage_backend``.

    Raises:
        ValueError: If the backend name is not recognized
    """
    if settings.storage_backend == "memory":
        return MemStorage()

    if settings.storage_backend == "database":
        from app.db.base import init_db

        session_factory = await init_db(settings.database_url)
        return DatabaseStorage(session_factory)

    raise ValueError(f"Unknown storage backend: {settings.storage_backend}. Valid backends: {BACKENDS}")


__all__ = ["BACKENDS", "DatabaseStorage", "MemStorage", "Storage", "build_storage"]
