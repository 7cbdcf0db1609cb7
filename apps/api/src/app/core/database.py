"""
Database Configuration

Async SQLAlchemy engine, session factory and declarative base.

Each table plays the role of one record collection (Users, Chapters,
ChapterHead, RegistrationRequests, Activities). There are no relational
joins between them; cross-collection consistency is handled by the
service layer.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.core.config import settings


class Base(DeclarativeBase):
    """Declarative base for all Unify models."""


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # SQLite requires NullPool for thread safety
        return {"connect_args": {"check_same_thread": False}, "poolclass": NullPool}
    if settings.is_development:
        return {"poolclass": NullPool}
    return {"pool_pre_ping": True}


engine = create_async_engine(
    settings.async_database_url,
    echo=settings.db_echo,
    **_engine_kwargs(settings.async_database_url),
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields a database session.

    Repository functions commit their own writes, so nothing is committed
    here; the session is rolled back if the request fails mid-way.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """
    Initialize the database.

    Creates any missing tables. Call this on application startup.
    """
    # Import models so they are registered on Base.metadata
    import app.modules.activities.models  # noqa: F401
    import app.modules.chapter_heads.models  # noqa: F401
    import app.modules.chapters.models  # noqa: F401
    import app.modules.registrations.models  # noqa: F401
    import app.modules.users.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine's connection pool."""
    await engine.dispose()
