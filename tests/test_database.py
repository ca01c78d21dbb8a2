from booking_api.config import settings
from booking_api.database import engine_options


def test_sqlite_options_share_connection_across_threads():
    options = engine_options("sqlite:///./booking.db")

    assert options["connect_args"] == {"check_same_thread": False}
    assert options["pool_pre_ping"] is True
    assert "pool_size" not in options


def test_server_database_options_use_pool_settings():
    options = engine_options("postgresql+psycopg://user:pw@db/booking")

    assert "connect_args" not in options
    assert options["pool_size"] == settings.DB_POOL_SIZE
    assert options["max_overflow"] == settings.DB_MAX_OVERFLOW
    assert options["pool_timeout"] == settings.DB_POOL_TIMEOUT
    assert options["pool_recycle"] == settings.DB_POOL_RECYCLE
