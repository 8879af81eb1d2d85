import os

# Must be set before app modules are imported: the limiter and settings read
# them at import time.
os.environ.setdefault("REDIS_URL", "memory://")
os.environ.setdefault("TRUST_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("REPORT_RATE_LIMIT", "1000/minute")
os.environ.setdefault("SOCIAL_RATE_LIMIT", "1000/minute")

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.accounts.models import Account
from app.database import get_db
from app.main import app
from app.moderation.content import ContentStoreError, get_content_store
from app.rate_limit import limiter
from shared.auth.config import AuthSettings
from shared.constants import Role
from shared.database.postgres import Base

TEST_DATABASE_URL = "sqlite+aiosqlite://"

# Fixed clock for service tests.
T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeContentStore:
    """In-memory stand-in for the content service."""

    def __init__(self) -> None:
        self.owners: dict[tuple[str, uuid.UUID], list[uuid.UUID]] = {}
        self.deleted: list[tuple[str, uuid.UUID]] = []
        self.fail_deletes = False
        self.fail_lookups = False

    def add(self, content_type: str, owner_id: uuid.UUID, *more_owners: uuid.UUID) -> uuid.UUID:
        content_id = uuid.uuid4()
        self.owners[(content_type, content_id)] = [owner_id, *more_owners]
        return content_id

    async def owner_of(self, content_type: str, content_id: uuid.UUID) -> list[uuid.UUID] | None:
        if self.fail_lookups:
            raise ContentStoreError("Content service is unavailable.")
        owners = self.owners.get((content_type, content_id))
        return list(owners) if owners is not None else None

    async def hard_delete(self, content_type: str, content_id: uuid.UUID) -> None:
        if self.fail_deletes:
            raise ContentStoreError("Content service is unavailable.")
        self.owners.pop((content_type, content_id), None)
        self.deleted.append((content_type, content_id))


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def content_store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture
def make_account(db_session: AsyncSession):
    """Factory: ``await make_account("nick", Role.ADMIN, created_at=...)``."""
    counter = {"n": 0}

    async def _make(
        nick: str | None = None,
        role: Role = Role.USER,
        *,
        created_at: datetime | None = None,
        **fields,
    ) -> Account:
        counter["n"] += 1
        nick = nick or f"user{counter['n']}"
        account = Account(
            nick=nick,
            email=f"{nick}@example.com",
            role=role,
            created_at=created_at or T0 - timedelta(days=365) + timedelta(minutes=counter["n"]),
            **fields,
        )
        db_session.add(account)
        # Committed so a rolled-back request in route tests cannot take it along.
        await db_session.commit()
        return account

    return _make


def make_token(user_id: uuid.UUID, *roles: Role) -> str:
    settings = AuthSettings()
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "email": f"{user_id}@example.com",
        "roles": [r.value for r in roles] or [Role.USER.value],
        "iss": settings.issuer,
        "aud": settings.audience,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=15)).timestamp()),
    }
    return jwt.encode(claims, settings.secret, algorithm=settings.algorithm)


def auth_headers(account: Account) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(account.id, account.role)}"}


@pytest_asyncio.fixture
async def async_client(
    db_session: AsyncSession, content_store: FakeContentStore
) -> AsyncGenerator[AsyncClient, None]:
    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_content_store] = lambda: content_store
    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
