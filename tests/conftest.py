import os
import tempfile

# Settings are read at import time; keep tests fast and off the real filesystem
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENABLE_MAINTENANCE", "false")
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="incubridge-uploads-")
os.environ["DATABASE_URL"] = ""
os.environ["DATABASE_URL_FALLBACK"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="incubridge-db-"), "default.db"
)

import datetime as dt  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from incubridge.app import app  # noqa: E402
from incubridge.database import get_session, init_db  # noqa: E402
from incubridge.models import AccountType, Admin, Startup  # noqa: E402
from incubridge.security import Role, create_access_token, hash_password  # noqa: E402
from incubridge.services.chat_store import reset_chat_service  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override
    reset_chat_service()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    reset_chat_service()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

async def make_startup(session, name="Acme", email=None, **fields) -> Startup:
    startup = Startup(
        email=email or f"{name.lower().replace(' ', '')}@startup.io",
        password_hash=hash_password(PASSWORD),
        name=name,
        industry=fields.pop("industry", "AI"),
        funding_stage=fields.pop("funding_stage", "Seed"),
        **fields,
    )
    session.add(startup)
    await session.commit()
    return startup


async def make_incubator(session, name, domain="AI/ML", created_at=None, **fields) -> Admin:
    incubator = Admin(
        email=fields.pop("email", f"{name.lower().replace(' ', '')}@incubator.io"),
        password_hash=hash_password(PASSWORD),
        name=name,
        user_type=AccountType.INCUBATOR.value,
        specialization=domain,
        created_at=created_at or dt.datetime(2024, 1, 1),
        **fields,
    )
    session.add(incubator)
    await session.commit()
    return incubator


async def make_admin(session, name="Root") -> Admin:
    admin = Admin(
        email=f"{name.lower()}@admin.io",
        password_hash=hash_password(PASSWORD),
        name=name,
        user_type=AccountType.ADMIN.value,
    )
    session.add(admin)
    await session.commit()
    return admin


def auth(account, role: Role) -> dict:
    token = create_access_token(account.id, role, account.email)
    return {"Authorization": f"Bearer {token}"}
