"""
User Repository

Database operations for student profiles. Every write commits on its own.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.users.models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        user_id: str,
        name: str,
        email: str,
        sap_id: str | None = None,
        year: str | None = None,
        registered_chapters: list[str] | None = None,
    ) -> User:
        """
        Create a new user record.

        Args:
            db: Database session
            user_id: Stable user identifier
            name: Display name
            email: Email address (the identity claim used to find the user)
            sap_id: Student id number (optional)
            year: Year of study (optional)
            registered_chapters: Initial chapter-name set (optional)

        Returns:
            Created User instance
        """
        user = User(
            user_id=user_id,
            name=name,
            email=email,
            sap_id=sap_id,
            year=year,
            registered_chapters=list(registered_chapters or []),
        )

        db.add(user)
        await db.commit()
        await db.refresh(user)

        logger.info(f"Created user: {user.user_id} - {user.email}")
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: str) -> User | None:
        """
        Get a user by ID.

        Args:
            db: Database session
            user_id: User identifier

        Returns:
            User instance or None if not found
        """
        result = await db.execute(
            select(User)
            .where(User.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """
        Get a user by email address.

        Email is not a key; the first match wins.
        """
        result = await db.execute(
            select(User)
            .where(User.email == email)
            .order_by(User.created_at)
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def list_all(db: AsyncSession) -> list[User]:
        result = await db.execute(select(User).execution_options(populate_existing=True))
        return list(result.scalars().all())

    @staticmethod
    async def set_registered_chapters(
        db: AsyncSession, user_id: str, chapter_names: list[str]
    ) -> User | None:
        """Replace the user's chapter-name set. Returns None if the user is gone."""
        user = await UserRepository.get_by_id(db, user_id)
        if user is None:
            return None

        # Assign a new list so the JSON column is flagged dirty
        user.registered_chapters = list(dict.fromkeys(chapter_names))
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def add_registered_chapter(
        db: AsyncSession, user_id: str, chapter_name: str
    ) -> User | None:
        """Add ``chapter_name`` to the user's set (no-op if already present)."""
        user = await UserRepository.get_by_id(db, user_id)
        if user is None:
            return None
        if user.is_registered_in(chapter_name):
            return user
        return await UserRepository.set_registered_chapters(
            db, user_id, [*(user.registered_chapters or []), chapter_name]
        )

    @staticmethod
    async def remove_registered_chapter(
        db: AsyncSession, user_id: str, chapter_name: str
    ) -> User | None:
        """Remove ``chapter_name`` from the user's set (no-op if absent)."""
        user = await UserRepository.get_by_id(db, user_id)
        if user is None:
            return None
        if not user.is_registered_in(chapter_name):
            return user
        return await UserRepository.set_registered_chapters(
            db,
            user_id,
            [name for name in user.registered_chapters if name != chapter_name],
        )
