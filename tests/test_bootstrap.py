from busfleet.core.config import Settings
from busfleet.core.security import verify_password
from busfleet.services.bootstrap import bootstrap, create_tables, ensure_admin_user


def test_admin_user_created_once(storage):
    settings = Settings(ADMIN_USERNAME="root", ADMIN_PASSWORD="s3cret", ADMIN_NAME="Root")

    assert ensure_admin_user(storage, settings) is True
    assert ensure_admin_user(storage, settings) is False

    user = storage.get_user_by_username("root")
    assert user.role == "admin"
    assert user.name == "Root"
    assert user.is_active
    assert user.hashed_password != "s3cret"
    assert verify_password("s3cret", user.hashed_password)


def test_bootstrap_creates_tables_when_enabled(storage, sql_engine):
    settings = Settings(ENABLE_CREATE_ALL=True)
    # Tables already exist on the test engine; create_all must be a no-op
    create_tables(sql_engine)
    assert bootstrap(storage, settings, sql_engine) is True
    assert bootstrap(storage, settings, sql_engine) is False
