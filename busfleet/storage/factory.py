# busfleet/storage/factory.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from busfleet.core.config import Settings, get_settings
from busfleet.storage.base import Storage
from busfleet.storage.memory import MemoryStorage

_memory_singleton: Optional[MemoryStorage] = None


def memory_storage() -> MemoryStorage:
    """Process-wide in-memory store (STORAGE_BACKEND=memory)."""
    global _memory_singleton
    if _memory_singleton is None:
        _memory_singleton = MemoryStorage()
    return _memory_singleton


@contextmanager
def open_storage(settings: Optional[Settings] = None) -> Iterator[Storage]:
    """
    Yield a Storage for the configured backend.
    SQL: one fresh Session per call, always closed afterwards.
    """
    settings = settings or get_settings()
    if settings.STORAGE_BACKEND == "memory":
        yield memory_storage()
        return

    from busfleet.db.session import SessionLocal
    from busfleet.storage.sql import SqlStorage

    db = SessionLocal()
    try:
        yield SqlStorage(db)
    finally:
        db.close()
