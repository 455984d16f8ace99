"""Service test fixtures - async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database with foreign keys enforced
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test database
    - Mail never leaves the process: get_mailer returns a recording FakeMailer
    - The clock is pinned: get_now returns FIXED_NOW unless a test overrides it

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - StaticPool: one shared connection, so every session sees the same in-memory DB
    - Users are inserted directly and authenticated with a real signed token
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from alphacore.api.dependencies import get_now, get_tokens
from alphacore.core.errors import EmailDeliveryError
from alphacore.db.base import Base
from alphacore.infrastructure.database import (
    DatabaseSessionManager, enable_sqlite_foreign_keys, get_db,
)
from alphacore.infrastructure.mailer import get_mailer
from alphacore.infrastructure.security import hash_password
import alphacore.infrastructure.database as db_module
import alphacore.models  # noqa: F401
from alphacore.main import app
from alphacore.models.project import Project, ProjectMember
from alphacore.models.user import User

# Wednesday 2024-01-17 12:00 in Istanbul
FIXED_NOW = datetime(2024, 1, 17, 9, 0, tzinfo=timezone.utc)
PASSWORD = "parola123"


class FakeMailer:
    """Records every send; addresses listed in `failing` raise instead."""

    def __init__(self):
        self.sent: list[dict] = []
        self.failing: set[str] = set()

    async def send_html(self, to: str, subject: str, html: str) -> None:
        if to in self.failing:
            raise EmailDeliveryError("mailbox unavailable", to)
        self.sent.append({"to": to, "subject": subject, "html": html})


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def clock():
    """Mutable holder for the pinned clock: set clock["now"] to move time."""
    return {"now": FIXED_NOW}


@pytest.fixture
async def client(test_engine, test_session_factory, mailer, clock):
    """FastAPI test client with DB, mailer and clock dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_now] = lambda: clock["now"]

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_user(test_db):
    """Factory: insert a user with the shared test password."""
    async def _make(name, email, role="MEMBER", password=PASSWORD) -> User:
        user = User(
            name=name, email=email, role=role,
            hashed_password=hash_password(password),
        )
        test_db.add(user)
        await test_db.commit()
        await test_db.refresh(user)
        return user
    return _make


@pytest.fixture
def headers_for():
    """Factory: Authorization header carrying a signed token for a user."""
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {get_tokens().issue(user.id)}"}
    return _headers


@pytest.fixture
async def admin(make_user):
    return await make_user("Ayşe Yönetici", "admin@alphacore.com.tr", "ADMIN")


@pytest.fixture
async def member(make_user):
    return await make_user("Mehmet Üye", "mehmet@alphacore.com.tr")


@pytest.fixture
async def other_member(make_user):
    return await make_user("Zeynep Diğer", "zeynep@alphacore.com.tr")


@pytest.fixture
def admin_headers(admin, headers_for):
    return headers_for(admin)


@pytest.fixture
def member_headers(member, headers_for):
    return headers_for(member)


@pytest.fixture
def other_headers(other_member, headers_for):
    return headers_for(other_member)


@pytest.fixture
async def project(test_db, member):
    """A project owned by `member`."""
    p = Project(name="Web Sitesi", color="#3b82f6", status="ACTIVE")
    p.members = [ProjectMember(user_id=member.id, role="OWNER")]
    test_db.add(p)
    await test_db.commit()
    await test_db.refresh(p)
    return p


@pytest.fixture
def password():
    """Plain-text password every fixture user is created with."""
    return PASSWORD
