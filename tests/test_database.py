from incubridge.database import DEFAULT_SQLITE_URL, resolve_database_url


def test_hosted_postgres_urls_use_asyncpg():
    assert resolve_database_url("postgres://u:p@db:5432/hub") == "postgresql+asyncpg://u:p@db:5432/hub"
    assert resolve_database_url("postgresql://u@db/hub") == "postgresql+asyncpg://u@db/hub"
    assert resolve_database_url("postgresql+asyncpg://u@db/hub") == "postgresql+asyncpg://u@db/hub"


def test_empty_url_falls_back_to_sqlite():
    assert resolve_database_url("") == DEFAULT_SQLITE_URL
    assert resolve_database_url("", "sqlite+aiosqlite:///./dev.db") == "sqlite+aiosqlite:///./dev.db"
