"""
Chapter Head Service

Chapter-head identity resolution, the chapter-head request gate, and the
read and toggle operations of the head portal.

A chapter head is authorized for exactly one chapter. Older chapter head
records may not carry a chapter id; resolve_chapter_context() finds it
from the stored chapter name or the legacy ``chapters`` list and writes
the result back so the next request takes the fast path.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_identity
from app.core.database import get_db
from app.core.security import CallerIdentity
from app.modules.activities.service import recent_activities
from app.modules.chapter_heads.models import ChapterHead
from app.modules.chapter_heads.repository import ChapterHeadRepository
from app.modules.chapter_heads.schemas import (
    ActivitiesResponse,
    ActivityItem,
    ChapterHeadAssign,
    HeadChapter,
    HeadChaptersResponse,
    HeadDashboardResponse,
    HeadDashboardStats,
    HeadProfileResponse,
    HeadRegistrationsResponse,
    MembershipCheckResponse,
    RegistrationWithMembership,
    ToggleRegistrationResponse,
)
from app.modules.chapters.models import Chapter
from app.modules.chapters.repository import ChapterRepository
from app.modules.chapters.schemas import ChapterResponse
from app.modules.chapters.service import ChapterNotFoundError
from app.modules.registrations import repository as registration_repository
from app.modules.registrations.models import RegistrationStatus
from app.modules.registrations.schemas import RegistrationResponse
from app.modules.registrations.service import UserNotFoundError
from app.modules.shared import AccessDeniedError, NotFoundError, ValidationError
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

CHAPTER_CONTEXT_HINT = (
    "No chapterId found for this chapter head. Add chapterId to ChapterHead table item "
    "or include chapterName that matches a Chapters record."
)


@dataclass
class ChapterHeadContext:
    """A chapter head together with the chapter they manage."""

    email: str
    chapter_id: str | None
    chapter_name: str | None = None
    head_name: str | None = None

    @classmethod
    def from_record(cls, head: ChapterHead) -> "ChapterHeadContext":
        return cls(
            email=head.email,
            chapter_id=head.chapter_id,
            chapter_name=head.chapter_name,
            head_name=head.head_name,
        )


class ChapterAccessDeniedError(AccessDeniedError):
    def __init__(self, message: str = "Access denied to requested chapter"):
        super().__init__(message, "CHAPTER_ACCESS_DENIED")


class MissingLookupKeyError(ValidationError):
    def __init__(self):
        super().__init__("Either userId or email parameter is required", "MISSING_LOOKUP_KEY")


class ChapterHeadNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Chapter head not found", "CHAPTER_HEAD_NOT_FOUND")


# =============================================================================
# Resolution and gate
# =============================================================================


async def _find_chapter_for(db: AsyncSession, head: ChapterHead) -> Chapter | None:
    if head.chapter_name:
        chapter = await ChapterRepository.get_by_name(db, head.chapter_name)
        if chapter is not None:
            return chapter

    if head.chapters:
        first = head.chapters[0]
        chapter = await ChapterRepository.get_by_id(db, first)
        if chapter is not None:
            return chapter
        return await ChapterRepository.get_by_name(db, first)

    return None


async def resolve_chapter_context(db: AsyncSession, head: ChapterHead) -> ChapterHeadContext:
    """
    Work out which chapter a chapter head manages.

    A record that already has ``chapter_id`` is returned unchanged. Otherwise
    the chapter is looked up by the record's ``chapter_name``, then by the
    first entry of ``chapters`` as an id, then as a name. A successful
    lookup is persisted back to the record (best-effort).

    Lookup errors are logged and leave the context unresolved
    (``chapter_id`` is None); they are never raised.
    """
    context = ChapterHeadContext.from_record(head)
    if context.chapter_id:
        return context

    try:
        chapter = await _find_chapter_for(db, head)
    except Exception as e:
        logger.warning(f"Error resolving chapter context for {context.email}: {e}")
        await db.rollback()
        return context

    if chapter is None:
        return context

    context.chapter_id = chapter.chapter_id
    context.chapter_name = chapter.chapter_name
    logger.info(f"Resolved chapter head {context.email} to chapter {context.chapter_id}")

    try:
        await ChapterHeadRepository.link_chapter(
            db, context.email, context.chapter_id, context.chapter_name
        )
    except Exception as e:
        logger.warning(f"Failed to store resolved chapter for {context.email}: {e}")
        await db.rollback()

    return context


async def get_current_chapter_head(
    identity: CallerIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> ChapterHeadContext:
    """
    FastAPI dependency that requires the caller to be a chapter head with a
    resolvable chapter.

    Raises:
        HTTPException 403: If the caller has no chapter head record
        HTTPException 400: If the chapter cannot be resolved
    """
    head = await ChapterHeadRepository.get_by_email(db, identity.email)
    if head is None:
        logger.warning(f"Access denied: {identity.email} is not a chapter head")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "Access denied. User is not a chapter head."},
        )

    context = await resolve_chapter_context(db, head)
    if not context.chapter_id:
        logger.warning(f"Chapter head {identity.email} has no resolvable chapter")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Chapter context not linked to chapter head",
                "details": CHAPTER_CONTEXT_HINT,
            },
        )

    return context


# =============================================================================
# Head portal
# =============================================================================


def _ensure_own_chapter(head: ChapterHeadContext, chapter_id: str, message: str) -> None:
    if chapter_id != head.chapter_id:
        logger.warning(f"{head.email} (chapter {head.chapter_id}) requested chapter {chapter_id}")
        raise ChapterAccessDeniedError(message)


def get_profile(head: ChapterHeadContext) -> HeadProfileResponse:
    return HeadProfileResponse(
        email=head.email,
        chapter_id=head.chapter_id,
        chapter_name=head.chapter_name,
        head_name=head.head_name,
    )


async def get_my_chapters(db: AsyncSession, head: ChapterHeadContext) -> HeadChaptersResponse:
    chapter = await ChapterRepository.get_by_id(db, head.chapter_id)
    if chapter is None:
        raise ChapterNotFoundError()

    return HeadChaptersResponse(
        chapters=[
            HeadChapter(
                chapter_id=chapter.chapter_id,
                chapter_name=chapter.chapter_name,
                created_at=chapter.created_at,
                head_email=chapter.head_email,
                head_name=chapter.head_name,
                member_count=chapter.members,
                status=chapter.status,
                updated_at=chapter.updated_at,
                registration_status="open" if chapter.registration_open else "closed",
            )
        ]
    )


async def get_dashboard_stats(db: AsyncSession, head: ChapterHeadContext) -> HeadDashboardResponse:
    """Counts are recomputed from the store on every call."""
    chapter = await ChapterRepository.get_by_id(db, head.chapter_id)
    registrations = await registration_repository.list_by_chapter(db, head.chapter_id)

    pending = sum(1 for r in registrations if r.status == RegistrationStatus.PENDING)
    recent = sum(
        1
        for r in registrations
        if r.status == RegistrationStatus.APPROVED and r.processed_at is not None
    )

    return HeadDashboardResponse(
        stats=HeadDashboardStats(
            total_chapters=1,
            total_members=chapter.members if chapter else 0,
            pending_registrations=pending,
            active_events=0,
            recent_registrations=recent,
        )
    )


async def list_registrations(
    db: AsyncSession,
    head: ChapterHeadContext,
    chapter_id: str | None = None,
) -> HeadRegistrationsResponse:
    """
    All registration requests of the head's chapter, each flagged with
    whether its student is currently an approved member.
    """
    if chapter_id is not None:
        _ensure_own_chapter(head, chapter_id, "Access denied to requested chapter")

    registrations = await registration_repository.list_by_chapter(db, head.chapter_id)
    members = {r.user_id for r in registrations if r.status == RegistrationStatus.APPROVED}

    return HeadRegistrationsResponse(
        registrations=[
            RegistrationWithMembership(
                **RegistrationResponse.model_validate(r).model_dump(),
                is_member=r.user_id in members,
            )
            for r in registrations
        ]
    )


async def toggle_registration(
    db: AsyncSession,
    head: ChapterHeadContext,
    chapter_id: str,
    new_status: str,
) -> ToggleRegistrationResponse:
    _ensure_own_chapter(head, chapter_id, "Access denied. Can only modify your own chapter.")

    is_open = new_status == "open"
    chapter = await ChapterRepository.set_registration_open(db, chapter_id, is_open)
    if chapter is None:
        raise ChapterNotFoundError()

    logger.info(f"{head.email} {'opened' if is_open else 'closed'} registration for {chapter_id}")
    return ToggleRegistrationResponse(
        message=f"Registration {'opened' if is_open else 'closed'} successfully",
        chapter=ChapterResponse.model_validate(chapter),
    )


async def check_membership(
    db: AsyncSession,
    head: ChapterHeadContext,
    user_id: str | None = None,
    email: str | None = None,
) -> MembershipCheckResponse:
    """Look a student up by id (preferred) or email and report membership."""
    if user_id:
        user = await UserRepository.get_by_id(db, user_id)
    elif email:
        user = await UserRepository.get_by_email(db, email)
    else:
        raise MissingLookupKeyError()

    if user is None:
        raise UserNotFoundError()

    membership = await registration_repository.find_approved(db, user.user_id, head.chapter_id)
    return MembershipCheckResponse(
        user_id=user.user_id,
        email=user.email,
        name=user.name,
        is_member=membership is not None,
        chapter_id=head.chapter_id,
    )


async def get_activities(
    db: AsyncSession, head: ChapterHeadContext, limit: int = 10
) -> ActivitiesResponse:
    activities = await recent_activities(db, head.chapter_id, limit)
    return ActivitiesResponse(
        activities=[
            ActivityItem(
                id=a.activity_id,
                type=a.type,
                message=a.message,
                timestamp=a.timestamp,
                chapter_id=a.chapter_id,
                user_id=a.user_id,
            )
            for a in activities
        ]
    )


# =============================================================================
# Admin
# =============================================================================


async def assign_chapter_head(db: AsyncSession, data: ChapterHeadAssign) -> ChapterHead:
    """
    Make ``data.email`` the head of ``data.chapter_id``.

    The chapter id and name are stored on the chapter head record at
    provisioning time, and the chapter's head fields are updated to match.
    """
    chapter = await ChapterRepository.get_by_id(db, data.chapter_id)
    if chapter is None:
        raise ChapterNotFoundError()

    existing = await ChapterHeadRepository.get_by_email(db, data.email)
    head_name = data.head_name or (existing.head_name if existing else None)
    chapter_id, chapter_name = chapter.chapter_id, chapter.chapter_name

    head = await ChapterHeadRepository.upsert(
        db,
        email=data.email,
        chapter_id=chapter_id,
        chapter_name=chapter_name,
        head_name=head_name,
    )
    await ChapterRepository.update(
        db,
        chapter_id,
        head_email=data.email,
        head_name=head_name if head_name is not None else chapter.head_name,
    )
    return head


async def list_chapter_heads(db: AsyncSession) -> list[ChapterHead]:
    return await ChapterHeadRepository.list_all(db)


async def remove_chapter_head(db: AsyncSession, email: str) -> None:
    if not await ChapterHeadRepository.delete(db, email):
        raise ChapterHeadNotFoundError()
