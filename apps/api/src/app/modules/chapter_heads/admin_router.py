"""
Chapter Head Admin Router

Provisioning of chapter heads. All endpoints require an admin caller.

Endpoints:
- POST /admin/chapter-heads - Assign a head to a chapter
- GET /admin/chapter-heads - List chapter heads
- DELETE /admin/chapter-heads/{email} - Remove a chapter head
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_admin
from app.core.database import get_db
from app.core.security import CallerIdentity
from app.modules.chapter_heads import service
from app.modules.chapter_heads.schemas import (
    ChapterHeadAssign,
    ChapterHeadListResponse,
    ChapterHeadResponse,
)
from app.modules.shared import UnifyServiceError
from app.modules.shared.schemas import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _handle_service_error(e: UnifyServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.post(
    "",
    response_model=ChapterHeadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign Chapter Head",
    description="""
Make a user the head of a chapter. The chapter id and name are stored on
the chapter head record, and the chapter's head email and name are
updated. Assigning an existing head again moves them to the new chapter.

**Access:** Admin only
""",
)
async def assign_chapter_head(
    data: ChapterHeadAssign,
    db: AsyncSession = Depends(get_db),
    admin: CallerIdentity = Depends(get_current_admin),
) -> ChapterHeadResponse:
    try:
        head = await service.assign_chapter_head(db, data)
        logger.info(f"Admin {admin.email} assigned {data.email} to chapter {data.chapter_id}")
        return ChapterHeadResponse.model_validate(head)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error assigning chapter head {data.email}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to assign chapter head", "details": str(e)},
        ) from e


@router.get("", response_model=ChapterHeadListResponse, summary="List Chapter Heads")
async def list_chapter_heads(
    db: AsyncSession = Depends(get_db),
    _admin: CallerIdentity = Depends(get_current_admin),
) -> ChapterHeadListResponse:
    heads = await service.list_chapter_heads(db)
    return ChapterHeadListResponse(
        chapter_heads=[ChapterHeadResponse.model_validate(h) for h in heads],
        total=len(heads),
    )


@router.delete("/{email}", response_model=MessageResponse, summary="Remove Chapter Head")
async def remove_chapter_head(
    email: str,
    db: AsyncSession = Depends(get_db),
    admin: CallerIdentity = Depends(get_current_admin),
) -> MessageResponse:
    try:
        await service.remove_chapter_head(db, email)
        logger.info(f"Admin {admin.email} removed chapter head {email}")
        return MessageResponse(message="Chapter head removed successfully")
    except UnifyServiceError as e:
        _handle_service_error(e)
