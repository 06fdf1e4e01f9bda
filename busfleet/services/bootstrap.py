# busfleet/services/bootstrap.py
"""
Explicit, idempotent process setup: create tables (SQL backend, dev only)
and make sure the admin account exists. Safe to run on every start.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.engine import Engine

from busfleet.core.config import Settings, get_settings
from busfleet.core.security import get_password_hash
from busfleet.db.base import Base
from busfleet.storage.base import Storage

log = logging.getLogger("busfleet.bootstrap")


def create_tables(engine: Engine) -> None:
    import busfleet.models  # noqa: F401  (register every table on Base.metadata)

    Base.metadata.create_all(bind=engine)


def ensure_admin_user(storage: Storage, settings: Optional[Settings] = None) -> bool:
    """Create the admin account if missing. Returns True if it was created."""
    settings = settings or get_settings()

    with storage.transaction():
        existing = storage.get_user_by_username(settings.ADMIN_USERNAME)
        if existing is not None:
            log.info("admin user %r already exists", settings.ADMIN_USERNAME)
            return False

        storage.create_user(
            username=settings.ADMIN_USERNAME,
            hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
            name=settings.ADMIN_NAME,
            role="admin",
            is_active=True,
        )

    log.info("admin user %r created", settings.ADMIN_USERNAME)
    return True


def bootstrap(storage: Storage, settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> bool:
    """Run once at process start. Returns whether the admin user was created."""
    settings = settings or get_settings()
    if engine is not None and settings.ENABLE_CREATE_ALL:
        create_tables(engine)
    return ensure_admin_user(storage, settings)
