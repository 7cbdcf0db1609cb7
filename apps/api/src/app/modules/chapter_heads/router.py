"""
Chapter Head Router

Endpoints of the chapter-head portal. Every endpoint requires a bearer
token whose email has a chapter head record with a resolvable chapter.

Endpoints:
- POST /chapterhead-profile - The caller's chapter head record (root path)
- GET /chapterhead/my-chapters - The head's chapter
- GET /chapterhead/dashboard - Member and request counts
- GET /chapterhead/registrations - All requests for the head's chapter
- GET /chapterhead/registrations/{chapter_id} - Same, with an explicit chapter id
- PUT /chapterhead/toggle-registration - Open or close registration
- PUT /chapterhead/registration/{registration_id} - Approve or reject a request
- DELETE /chapterhead/kick-student - Remove an approved member
- GET /chapterhead/check-membership - Is a student a member?
- GET /chapterhead/activities - Recent membership activity

Rate limits (per chapter head):
- Decisions: 30 per minute
- Removals: 10 per minute
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.rate_limit import enforce_rate_limit
from app.modules.chapter_heads import service
from app.modules.chapter_heads.schemas import (
    ActivitiesResponse,
    HeadChaptersResponse,
    HeadDashboardResponse,
    HeadProfileResponse,
    HeadRegistrationsResponse,
    MembershipCheckResponse,
    ToggleRegistrationRequest,
    ToggleRegistrationResponse,
)
from app.modules.chapter_heads.service import ChapterHeadContext, get_current_chapter_head
from app.modules.registrations import service as registration_service
from app.modules.registrations.schemas import (
    DecisionRequest,
    DecisionResponse,
    KickRequest,
    KickResponse,
)
from app.modules.shared import UnifyServiceError

logger = logging.getLogger(__name__)

router = APIRouter()

# Mounted at the root: the head portal calls /chapterhead-profile
profile_router = APIRouter()

DECIDE_RATE_LIMIT = 30
KICK_RATE_LIMIT = 10
RATE_LIMIT_WINDOW_SECONDS = 60


def _handle_service_error(e: UnifyServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(status_code=e.status_code, detail=e.to_detail())


def _internal_error(error: str, e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": error, "details": str(e)},
    )


@profile_router.post(
    "/chapterhead-profile",
    response_model=HeadProfileResponse,
    summary="Get Chapter Head Profile",
    description="""
Return the caller's chapter head record with its resolved chapter. The
caller is taken from the bearer token; any request body is ignored.
""",
)
async def get_profile(
    head: ChapterHeadContext = Depends(get_current_chapter_head),
) -> HeadProfileResponse:
    return service.get_profile(head)


@router.get("/my-chapters", response_model=HeadChaptersResponse, summary="Get My Chapter")
async def get_my_chapters(
    head: ChapterHeadContext = Depends(get_current_chapter_head),
    db: AsyncSession = Depends(get_db),
) -> HeadChaptersResponse:
    try:
        return await service.get_my_chapters(db, head)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error getting chapters for {head.email}: {e}")
        raise _internal_error("Failed to fetch chapters", e) from e


@router.get("/dashboard", response_model=HeadDashboardResponse, summary="Get Dashboard Stats")
async def get_dashboard(
    head: ChapterHeadContext = Depends(get_current_chapter_head),
    db: AsyncSession = Depends(get_db),
) -> HeadDashboardResponse:
    try:
        return await service.get_dashboard_stats(db, head)
    except Exception as e:
        logger.exception(f"Error getting dashboard stats for {head.email}: {e}")
        raise _internal_error("Failed to fetch dashboard statistics", e) from e


@router.get(
    "/registrations",
    response_model=HeadRegistrationsResponse,
    summary="List Registrations",
)
async def list_registrations(
    head: ChapterHeadContext = Depends(get_current_chapter_head),
    db: AsyncSession = Depends(get_db),
) -> HeadRegistrationsResponse:
    try:
        return await service.list_registrations(db, head)
    except Exception as e:
        logger.exception(f"Error listing registrations for {head.chapter_id}: {e}")
        raise _internal_error("Failed to fetch registrations", e) from e


@router.get(
    "/registrations/{chapter_id}",
    response_model=HeadRegistrationsResponse,
    summary="List Registrations For Chapter",
    description="Same as `/registrations`, but the chapter id must be the head's own.",
)
async def list_chapter_registrations(
    chapter_id: str,
    head: ChapterHeadContext = Depends(get_current_chapter_head),
    db: AsyncSession = Depends(get_db),
) -> HeadRegistrationsResponse:
    try:
        return await service.list_registrations(db, head, chapter_id=chapter_id)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error listing registrations for {chapter_id}: {e}")
        raise _internal_error("Failed to fetch registrations", e) from e


@router.put(
    "/toggle-registration",
    response_model=ToggleRegistrationResponse,
    summary="Open Or Close Registration",
)
async def toggle_registration(
    data: ToggleRegistrationRequest,
    head: ChapterHeadContext = Depends(get_current_chapter_head),
    db: AsyncSession = Depends(get_db),
) -> ToggleRegistrationResponse:
    try:
        return await service.toggle_registration(db, head, data.chapter_id, data.status)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error toggling registration for {data.chapter_id}: {e}")
        raise _internal_error("Failed to update registration status", e) from e


@router.put(
    "/registration/{registration_id}",
    response_model=DecisionResponse,
    summary="Decide Registration",
    description="""
Approve or reject a registration request.

The new status overwrites the current one whatever it is. Approving adds
the chapter to the student's chapters and increments the member count;
those two updates are best-effort and are corrected by the periodic
membership reconciliation if they fail or double-count.

**Rate limit:** 30 decisions per minute per chapter head
""",
)
async def decide_registration(
    registration_id: str,
    data: DecisionRequest,
    head: ChapterHeadContext = Depends(get_current_chapter_head),
    db: AsyncSession = Depends(get_db),
) -> DecisionResponse:
    await enforce_rate_limit(
        "chapterhead:decide", head.email, DECIDE_RATE_LIMIT, RATE_LIMIT_WINDOW_SECONDS
    )
    try:
        return await registration_service.decide(
            db,
            registration_id,
            data.status,
            acting_head_email=head.email,
            notes=data.notes,
            acting_chapter_id=head.chapter_id,
        )
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error deciding registration {registration_id}: {e}")
        raise _internal_error("Failed to update registration status", e) from e


@router.delete(
    "/kick-student",
    response_model=KickResponse,
    summary="Remove Member",
    description="""
Remove an approved member from the head's chapter. The request body carries
the student's email and an optional reason.

**Rate limit:** 10 removals per minute per chapter head
""",
)
async def kick_student(
    data: KickRequest,
    head: ChapterHeadContext = Depends(get_current_chapter_head),
    db: AsyncSession = Depends(get_db),
) -> KickResponse:
    await enforce_rate_limit(
        "chapterhead:kick", head.email, KICK_RATE_LIMIT, RATE_LIMIT_WINDOW_SECONDS
    )
    try:
        return await registration_service.kick(
            db,
            chapter_id=head.chapter_id,
            acting_head_email=head.email,
            student_email=data.student_email,
            reason=data.reason,
        )
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error removing {data.student_email} from {head.chapter_id}: {e}")
        raise _internal_error("Failed to remove student from chapter", e) from e


@router.get(
    "/check-membership",
    response_model=MembershipCheckResponse,
    summary="Check Membership",
)
async def check_membership(
    user_id: str | None = Query(None, alias="userId"),
    email: str | None = Query(None),
    head: ChapterHeadContext = Depends(get_current_chapter_head),
    db: AsyncSession = Depends(get_db),
) -> MembershipCheckResponse:
    try:
        return await service.check_membership(db, head, user_id=user_id, email=email)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error checking membership: {e}")
        raise _internal_error("Failed to check membership", e) from e


@router.get("/activities", response_model=ActivitiesResponse, summary="Recent Activities")
async def get_activities(
    limit: int = Query(10, ge=1, le=100),
    head: ChapterHeadContext = Depends(get_current_chapter_head),
    db: AsyncSession = Depends(get_db),
) -> ActivitiesResponse:
    try:
        return await service.get_activities(db, head, limit=limit)
    except Exception as e:
        logger.exception(f"Error getting activities for {head.chapter_id}: {e}")
        raise _internal_error("Failed to fetch activities", e) from e
