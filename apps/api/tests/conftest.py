"""
Shared fixtures for Unify API tests.

Tests run against an in-memory SQLite database. The HTTP client drives the
FastAPI app through httpx's ASGI transport with ``get_db`` overridden, so
requests and test code share one session. Redis is never connected, so
rate limiting uses the in-memory store.
"""

import os

# Settings are read once at import time
os.environ["PYTHON_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["MEMBERSHIP_RECONCILE_ENABLED"] = "false"
os.environ["JWT_VERIFY_SIGNATURE"] = "false"
os.environ.pop("RESEND_API_KEY", None)

from collections.abc import Callable  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.modules.activities.models  # noqa: E402, F401
import app.modules.chapter_heads.models  # noqa: E402, F401
import app.modules.chapters.models  # noqa: E402, F401
import app.modules.registrations.models  # noqa: E402, F401
import app.modules.users.models  # noqa: E402, F401
from app.core.database import Base, get_db  # noqa: E402
from app.core.rate_limit import reset_memory_store  # noqa: E402
from app.core.security import CallerIdentity  # noqa: E402
from app.main import app  # noqa: E402
from app.modules.chapter_heads.repository import ChapterHeadRepository  # noqa: E402
from app.modules.chapters.repository import ChapterRepository  # noqa: E402
from app.modules.users.repository import UserRepository  # noqa: E402

HEAD_EMAIL = "head@unify.dev"
STUDENT_EMAIL = "alice@unify.dev"
ADMIN_EMAIL = "admin@unify.dev"


def make_token(email: str, groups: list[str] | None = None, **claims) -> str:
    """Encode a bearer token. Signatures are not verified in tests."""
    payload = {"sub": email, "email": email, **claims}
    if groups:
        payload["cognito:groups"] = groups
    return jwt.encode(payload, "test-secret", algorithm="HS256")


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Build an Authorization header for the given email."""

    def _headers(email: str, groups: list[str] | None = None) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(email, groups)}"}

    return _headers


@pytest.fixture(autouse=True)
def _clear_rate_limits():
    reset_memory_store()
    yield
    reset_memory_store()


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.rollback = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest_asyncio.fixture
async def db():
    """A session on a fresh in-memory database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db):
    """HTTP client bound to the app, using the test session for every request."""

    async def _get_test_db():
        yield db

    app.dependency_overrides[get_db] = _get_test_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ============================================
# Seed data
# ============================================


@pytest_asyncio.fixture
async def chapter(db):
    """The Robotics chapter, open for registration."""
    return await ChapterRepository.create(
        db,
        chapter_id="robotics",
        chapter_name="Robotics",
        head_email=HEAD_EMAIL,
        head_name="Robotics Head",
        registration_open=True,
    )


@pytest_asyncio.fixture
async def chapter_head(db, chapter):
    """A chapter head record linked to the Robotics chapter."""
    return await ChapterHeadRepository.upsert(
        db,
        email=HEAD_EMAIL,
        chapter_id=chapter.chapter_id,
        chapter_name=chapter.chapter_name,
        head_name="Robotics Head",
    )


@pytest_asyncio.fixture
async def student(db):
    """Alice, a student with no chapters."""
    return await UserRepository.create(
        db,
        user_id="alice",
        name="Alice",
        email=STUDENT_EMAIL,
        sap_id="500100",
        year="2",
    )


@pytest.fixture
def student_identity() -> CallerIdentity:
    return CallerIdentity(email=STUDENT_EMAIL)


@pytest.fixture
def admin_identity() -> CallerIdentity:
    return CallerIdentity(email=ADMIN_EMAIL, groups=["admin"])
