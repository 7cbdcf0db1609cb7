"""
Chapter Service

Chapter administration: create, edit, list and delete chapters.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.chapters.models import Chapter, ChapterStatus
from app.modules.chapters.repository import ChapterRepository
from app.modules.chapters.schemas import ChapterCreate, ChapterUpdate
from app.modules.shared import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class ChapterNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Chapter not found", "CHAPTER_NOT_FOUND")


class DuplicateChapterError(ConflictError):
    def __init__(self, chapter_name: str):
        super().__init__(
            f"A chapter named '{chapter_name}' already exists", "DUPLICATE_CHAPTER"
        )


async def create_chapter(db: AsyncSession, data: ChapterCreate) -> Chapter:
    """
    Create an active chapter with registration closed and no members.

    Raises:
        DuplicateChapterError: If the name or id is already taken
    """
    if await ChapterRepository.get_by_name(db, data.chapter_name):
        raise DuplicateChapterError(data.chapter_name)

    chapter_id = data.chapter_id or str(uuid.uuid4())
    if await ChapterRepository.get_by_id(db, chapter_id):
        raise DuplicateChapterError(data.chapter_name)

    chapter = await ChapterRepository.create(
        db,
        chapter_id=chapter_id,
        chapter_name=data.chapter_name,
        head_email=data.head_email,
        head_name=data.head_name,
        status=ChapterStatus.ACTIVE,
        registration_open=False,
        member_count=0,
    )
    return chapter


async def get_chapter(db: AsyncSession, chapter_id: str) -> Chapter:
    chapter = await ChapterRepository.get_by_id(db, chapter_id)
    if chapter is None:
        raise ChapterNotFoundError()
    return chapter


async def list_chapters(
    db: AsyncSession, skip: int = 0, limit: int = 50
) -> tuple[list[Chapter], int]:
    return await ChapterRepository.list_all(db, skip=skip, limit=limit)


async def update_chapter(db: AsyncSession, chapter_id: str, data: ChapterUpdate) -> Chapter:
    """
    Apply a partial update.

    Renaming does not rewrite the chapter name already stored on
    registrations and in students' chapter sets; the reconciliation job
    rebuilds the sets from approved registrations.
    """
    chapter = await get_chapter(db, chapter_id)

    fields = data.model_dump(exclude_unset=True, by_alias=False)
    new_name = fields.get("chapter_name")
    if new_name and new_name != chapter.chapter_name:
        existing = await ChapterRepository.get_by_name(db, new_name)
        if existing is not None and existing.chapter_id != chapter_id:
            raise DuplicateChapterError(new_name)

    updated = await ChapterRepository.update(db, chapter_id, **fields)
    if updated is None:
        raise ChapterNotFoundError()

    logger.info(f"Updated chapter {chapter_id}: {sorted(fields)}")
    return updated


async def delete_chapter(db: AsyncSession, chapter_id: str) -> None:
    if not await ChapterRepository.delete(db, chapter_id):
        raise ChapterNotFoundError()
