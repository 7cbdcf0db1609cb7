"""
Chapter Admin Router

Chapter administration endpoints. All endpoints require an admin caller.

Endpoints:
- POST /admin/chapters - Create a chapter
- GET /admin/chapters - List chapters (paginated)
- GET /admin/chapters/{chapter_id} - Get one chapter
- PUT /admin/chapters/{chapter_id} - Partially update a chapter
- DELETE /admin/chapters/{chapter_id} - Delete a chapter
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_admin
from app.core.database import get_db
from app.core.security import CallerIdentity
from app.modules.chapters import service
from app.modules.chapters.schemas import (
    ChapterCreate,
    ChapterListResponse,
    ChapterResponse,
    ChapterUpdate,
)
from app.modules.shared import UnifyServiceError
from app.modules.shared.schemas import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _handle_service_error(e: UnifyServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(status_code=e.status_code, detail=e.to_detail())


def _internal_error(error: str, e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": error, "details": str(e)},
    )


@router.post(
    "",
    response_model=ChapterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Chapter",
    description="""
Create a new chapter. New chapters are active, closed for registration and
start with zero members.

**Access:** Admin only
""",
    responses={409: {"description": "A chapter with this name already exists"}},
)
async def create_chapter(
    data: ChapterCreate,
    db: AsyncSession = Depends(get_db),
    admin: CallerIdentity = Depends(get_current_admin),
) -> ChapterResponse:
    try:
        chapter = await service.create_chapter(db, data)
        logger.info(f"Admin {admin.email} created chapter {chapter.chapter_id}")
        return ChapterResponse.model_validate(chapter)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error creating chapter: {e}")
        raise _internal_error("Failed to create chapter", e) from e


@router.get("", response_model=ChapterListResponse, summary="List Chapters")
async def list_chapters(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    _admin: CallerIdentity = Depends(get_current_admin),
) -> ChapterListResponse:
    try:
        chapters, total = await service.list_chapters(db, skip=skip, limit=limit)
        return ChapterListResponse(
            chapters=[ChapterResponse.model_validate(c) for c in chapters],
            total=total,
            skip=skip,
            limit=limit,
        )
    except Exception as e:
        logger.exception(f"Error listing chapters: {e}")
        raise _internal_error("Failed to list chapters", e) from e


@router.get("/{chapter_id}", response_model=ChapterResponse, summary="Get Chapter")
async def get_chapter(
    chapter_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: CallerIdentity = Depends(get_current_admin),
) -> ChapterResponse:
    try:
        return ChapterResponse.model_validate(await service.get_chapter(db, chapter_id))
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error getting chapter {chapter_id}: {e}")
        raise _internal_error("Failed to get chapter", e) from e


@router.put("/{chapter_id}", response_model=ChapterResponse, summary="Update Chapter")
async def update_chapter(
    chapter_id: str,
    data: ChapterUpdate,
    db: AsyncSession = Depends(get_db),
    admin: CallerIdentity = Depends(get_current_admin),
) -> ChapterResponse:
    try:
        chapter = await service.update_chapter(db, chapter_id, data)
        logger.info(f"Admin {admin.email} updated chapter {chapter_id}")
        return ChapterResponse.model_validate(chapter)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error updating chapter {chapter_id}: {e}")
        raise _internal_error("Failed to update chapter", e) from e


@router.delete("/{chapter_id}", response_model=MessageResponse, summary="Delete Chapter")
async def delete_chapter(
    chapter_id: str,
    db: AsyncSession = Depends(get_db),
    admin: CallerIdentity = Depends(get_current_admin),
) -> MessageResponse:
    try:
        await service.delete_chapter(db, chapter_id)
        logger.info(f"Admin {admin.email} deleted chapter {chapter_id}")
        return MessageResponse(message="Chapter deleted successfully")
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error deleting chapter {chapter_id}: {e}")
        raise _internal_error("Failed to delete chapter", e) from e
