"""
Chapter Repository

Database operations for chapters.

Counter updates are single UPDATE statements so each one is atomic on its
row; nothing here spans more than one record.
"""

import logging
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.chapters.models import Chapter, ChapterStatus
from app.modules.shared import utcnow

logger = logging.getLogger(__name__)


class ChapterRepository:
    """Repository for chapter database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        chapter_id: str,
        chapter_name: str,
        head_email: str | None = None,
        head_name: str | None = None,
        status: ChapterStatus = ChapterStatus.ACTIVE,
        registration_open: bool = False,
        member_count: int | None = 0,
    ) -> Chapter:
        """
        Create a new chapter record.

        Args:
            db: Database session
            chapter_id: Stable chapter identifier
            chapter_name: Unique display name
            head_email: Chapter head email (optional)
            head_name: Chapter head name (optional)
            status: Listing status
            registration_open: Whether students may apply
            member_count: Initial counter value

        Returns:
            Created Chapter instance
        """
        chapter = Chapter(
            chapter_id=chapter_id,
            chapter_name=chapter_name,
            head_email=head_email,
            head_name=head_name,
            status=status,
            registration_open=registration_open,
            member_count=member_count,
        )

        db.add(chapter)
        await db.commit()
        await db.refresh(chapter)

        logger.info(f"Created chapter: {chapter.chapter_id} - {chapter.chapter_name}")
        return chapter

    @staticmethod
    async def get_by_id(db: AsyncSession, chapter_id: str) -> Chapter | None:
        result = await db.execute(
            select(Chapter)
            .where(Chapter.chapter_id == chapter_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_name(db: AsyncSession, chapter_name: str) -> Chapter | None:
        result = await db.execute(
            select(Chapter)
            .where(Chapter.chapter_name == chapter_name)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    @staticmethod
    async def get_many_by_names(db: AsyncSession, chapter_names: list[str]) -> list[Chapter]:
        if not chapter_names:
            return []
        result = await db.execute(
            select(Chapter)
            .where(Chapter.chapter_name.in_(chapter_names))
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_many_by_ids(db: AsyncSession, chapter_ids: list[str]) -> list[Chapter]:
        if not chapter_ids:
            return []
        result = await db.execute(
            select(Chapter)
            .where(Chapter.chapter_id.in_(chapter_ids))
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_active(db: AsyncSession) -> list[Chapter]:
        result = await db.execute(
            select(Chapter)
            .where(Chapter.status == ChapterStatus.ACTIVE)
            .order_by(Chapter.chapter_name)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def list_all(
        db: AsyncSession, skip: int = 0, limit: int | None = None
    ) -> tuple[list[Chapter], int]:
        """
        List chapters ordered by name.

        Returns:
            Tuple of (chapters, total count)
        """
        total = (await db.execute(select(func.count()).select_from(Chapter))).scalar_one()

        query = select(Chapter).order_by(Chapter.chapter_name).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().all()), total

    @staticmethod
    async def update(db: AsyncSession, chapter_id: str, **fields: Any) -> Chapter | None:
        """Set the given attributes on a chapter. Returns None if not found."""
        chapter = await ChapterRepository.get_by_id(db, chapter_id)
        if chapter is None:
            return None

        for key, value in fields.items():
            setattr(chapter, key, value)

        await db.commit()
        await db.refresh(chapter)
        return chapter

    @staticmethod
    async def delete(db: AsyncSession, chapter_id: str) -> bool:
        chapter = await ChapterRepository.get_by_id(db, chapter_id)
        if chapter is None:
            return False

        await db.delete(chapter)
        await db.commit()
        logger.info(f"Deleted chapter: {chapter_id}")
        return True

    @staticmethod
    async def set_registration_open(
        db: AsyncSession, chapter_id: str, is_open: bool
    ) -> Chapter | None:
        return await ChapterRepository.update(db, chapter_id, registration_open=is_open)

    @staticmethod
    async def increment_member_count(db: AsyncSession, chapter_id: str) -> None:
        """``member_count = coalesce(member_count, 0) + 1``."""
        await db.execute(
            update(Chapter)
            .where(Chapter.chapter_id == chapter_id)
            .values(
                member_count=func.coalesce(Chapter.member_count, 0) + 1,
                updated_at=utcnow(),
            )
        )
        await db.commit()

    @staticmethod
    async def decrement_member_count(db: AsyncSession, chapter_id: str) -> int:
        """
        Decrement ``member_count`` without going below zero.

        The decrement only applies while the counter is positive. When that
        guard fails the counter is forced to 0.

        Returns:
            1 if the guarded decrement applied, 0 if the counter was reset
        """
        result = await db.execute(
            update(Chapter)
            .where(Chapter.chapter_id == chapter_id, Chapter.member_count > 0)
            .values(member_count=Chapter.member_count - 1, updated_at=utcnow())
        )
        if result.rowcount:
            await db.commit()
            return 1

        await db.execute(
            update(Chapter)
            .where(Chapter.chapter_id == chapter_id)
            .values(member_count=0, updated_at=utcnow())
        )
        await db.commit()
        logger.info(f"Member count for chapter {chapter_id} was already 0, left at 0")
        return 0

    @staticmethod
    async def set_member_count(db: AsyncSession, chapter_id: str, count: int) -> None:
        await db.execute(
            update(Chapter)
            .where(Chapter.chapter_id == chapter_id)
            .values(member_count=count, updated_at=utcnow())
        )
        await db.commit()
