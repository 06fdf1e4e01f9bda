# busfleet/db/session.py
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from busfleet.core.config import get_settings


def make_engine(url: str, *, echo: bool = False, **kwargs) -> Engine:
    """
    Build an engine for `url`. SQLite gets thread-sharing and per-connection
    foreign keys (needed for ON DELETE CASCADE on documents/status rows).
    """
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    eng = create_engine(
        url,
        connect_args=connect_args,
        echo=echo,
        pool_pre_ping=True,
        future=True,
        **kwargs,
    )

    if is_sqlite:

        @event.listens_for(eng, "connect")
        def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.close()

    return eng


_settings = get_settings()

engine = make_engine(_settings.DATABASE_URL, echo=_settings.DATABASE_ECHO)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    future=True,
)
