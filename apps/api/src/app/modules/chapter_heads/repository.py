"""
Chapter Head Repository

Database operations for chapter head records.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.chapter_heads.models import ChapterHead

logger = logging.getLogger(__name__)


class ChapterHeadRepository:
    """Repository for chapter head database operations."""

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> ChapterHead | None:
        result = await db.execute(
            select(ChapterHead)
            .where(ChapterHead.email == email)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_all(db: AsyncSession) -> list[ChapterHead]:
        result = await db.execute(
            select(ChapterHead)
            .order_by(ChapterHead.email)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    async def upsert(
        db: AsyncSession,
        *,
        email: str,
        chapter_id: str | None = None,
        chapter_name: str | None = None,
        head_name: str | None = None,
        chapters: list[str] | None = None,
    ) -> ChapterHead:
        """
        Create or replace the chapter head record for ``email``.

        Args:
            db: Database session
            email: Chapter head email (record key)
            chapter_id: Managed chapter id
            chapter_name: Managed chapter name
            head_name: Display name
            chapters: Legacy list of chapter ids or names

        Returns:
            The stored ChapterHead
        """
        head = await ChapterHeadRepository.get_by_email(db, email)
        if head is None:
            head = ChapterHead(email=email)
            db.add(head)

        head.chapter_id = chapter_id
        head.chapter_name = chapter_name
        head.head_name = head_name
        head.chapters = list(chapters) if chapters is not None else None

        await db.commit()
        await db.refresh(head)

        logger.info(f"Saved chapter head {email} for chapter {chapter_id}")
        return head

    @staticmethod
    async def link_chapter(
        db: AsyncSession, email: str, chapter_id: str, chapter_name: str
    ) -> ChapterHead | None:
        """Store a resolved chapter id and name on an existing record."""
        head = await ChapterHeadRepository.get_by_email(db, email)
        if head is None:
            return None

        head.chapter_id = chapter_id
        head.chapter_name = chapter_name
        await db.commit()
        await db.refresh(head)
        return head

    @staticmethod
    async def delete(db: AsyncSession, email: str) -> bool:
        head = await ChapterHeadRepository.get_by_email(db, email)
        if head is None:
            return False

        await db.delete(head)
        await db.commit()
        logger.info(f"Deleted chapter head {email}")
        return True
