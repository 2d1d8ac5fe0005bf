"""
IncuBridge storage -- one async engine shared by routes, services and scripts.

DATABASE_URL selects Postgres (asyncpg). Without it every table lives in a
local aiosqlite file named by DATABASE_URL_FALLBACK. Both can come from a
.env next to run.py.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

load_dotenv()

DEFAULT_SQLITE_URL = "sqlite+aiosqlite:///./local_incubridge.db"

_ASYNC_SCHEMES = (
    ("postgres://", "postgresql+asyncpg://"),
    ("postgresql://", "postgresql+asyncpg://"),
)


def resolve_database_url(raw: str = "", fallback: str = "") -> str:
    """Async driver URL for *raw*, or the sqlite *fallback* when *raw* is empty."""
    if not raw:
        return fallback or DEFAULT_SQLITE_URL
    for scheme, async_scheme in _ASYNC_SCHEMES:
        if raw.startswith(scheme):
            return async_scheme + raw[len(scheme):]
    return raw


DATABASE_URL = resolve_database_url(
    os.environ.get("DATABASE_URL", ""),
    os.environ.get("DATABASE_URL_FALLBACK", ""),
)

engine = create_async_engine(DATABASE_URL, echo=False)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def init_db(bind=None):
    """Create the IncuBridge tables on *bind* (the app engine by default)."""
    from incubridge import models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncSession:
    async with async_session() as session:
        yield session
