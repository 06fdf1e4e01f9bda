from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from busfleet.db.base import Base
import busfleet.models  # noqa: F401
from busfleet.storage.memory import MemoryStorage
from busfleet.storage.sql import SqlStorage

# Wednesday of ISO week 7, 2026
NOW = datetime(2026, 2, 11, 12, 0, 0)


@pytest.fixture
def sql_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _fk_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def storage(request):
    if request.param == "memory":
        yield MemoryStorage()
        return

    engine = request.getfixturevalue("sql_engine")
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    db = Session()
    try:
        yield SqlStorage(db)
    finally:
        db.close()


@pytest.fixture
def make_bus(storage):
    def _make(number="101", plate=None):
        with storage.transaction():
            return storage.create_bus(number, plate)

    return _make


@pytest.fixture
def client():
    from busfleet.api.deps import get_storage
    from busfleet.main import create_app
    from busfleet.core.config import Settings

    app = create_app(Settings(STORAGE_BACKEND="memory", ENABLE_SCHEDULER=False))
    mem = MemoryStorage()
    app.dependency_overrides[get_storage] = lambda: mem
    # No `with` block: startup hooks (bootstrap, scheduler) do not run
    return TestClient(app)
