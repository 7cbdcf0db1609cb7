"""
Student Router

Endpoints of the student portal. Every endpoint requires a bearer token;
the caller is identified by its email claim.

Endpoints:
- POST /register-student - Apply to a chapter
- GET /get-chapters - Browse active chapters
- GET /student/my-chapters - Chapters the caller belongs to
- GET /student/profile - Caller's student profile
- GET /student/dashboard - Caller's profile and chapter summary
- GET /student/pending-registrations - All of the caller's requests
- DELETE /student/chapters/{chapter_id}/leave - Leave a chapter

Rate limits (per student):
- Applications: 10 per minute
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_identity
from app.core.database import get_db
from app.core.rate_limit import enforce_rate_limit
from app.core.security import CallerIdentity
from app.modules.registrations import service as registration_service
from app.modules.registrations.schemas import ApplyRequest, ApplyResponse, LeaveResponse
from app.modules.shared import UnifyServiceError
from app.modules.students import service
from app.modules.students.schemas import (
    ChapterListingResponse,
    MyChaptersResponse,
    StudentDashboardResponse,
    StudentProfileResponse,
    StudentRegistrationsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

APPLY_RATE_LIMIT = 10
RATE_LIMIT_WINDOW_SECONDS = 60


def _handle_service_error(e: UnifyServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(status_code=e.status_code, detail=e.to_detail())


def _internal_error(error: str, e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": error, "details": str(e)},
    )


@router.post(
    "/register-student",
    response_model=ApplyResponse,
    summary="Apply To Chapter",
    description="""
Submit a registration request for the caller. The caller's email must match
`studentEmail`, the chapter must be open for registration, and the caller
must not already have a pending or approved request for it.

**Rate limit:** 10 applications per minute per student
""",
)
async def register_student(
    data: ApplyRequest,
    identity: CallerIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> ApplyResponse:
    await enforce_rate_limit(
        "student:apply", identity.email, APPLY_RATE_LIMIT, RATE_LIMIT_WINDOW_SECONDS
    )
    try:
        return await registration_service.apply(db, identity, data)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error registering {data.student_email} for {data.chapter_name}: {e}")
        raise _internal_error("Failed to register for chapter", e) from e


@router.get("/get-chapters", response_model=ChapterListingResponse, summary="List Chapters")
async def get_chapters(
    _identity: CallerIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> ChapterListingResponse:
    try:
        return await service.list_available_chapters(db)
    except Exception as e:
        logger.exception(f"Error listing chapters: {e}")
        raise _internal_error("Failed to fetch chapters", e) from e


@router.get("/student/my-chapters", response_model=MyChaptersResponse, summary="My Chapters")
async def get_my_chapters(
    identity: CallerIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> MyChaptersResponse:
    try:
        return await service.get_my_chapters(db, identity)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error getting chapters of {identity.email}: {e}")
        raise _internal_error("Failed to fetch registered chapters", e) from e


@router.get("/student/profile", response_model=StudentProfileResponse, summary="My Profile")
async def get_profile(
    identity: CallerIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> StudentProfileResponse:
    try:
        return await service.get_profile(db, identity)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error getting profile of {identity.email}: {e}")
        raise _internal_error("Failed to fetch profile", e) from e


@router.get(
    "/student/dashboard",
    response_model=StudentDashboardResponse,
    summary="Student Dashboard",
)
async def get_dashboard(
    identity: CallerIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> StudentDashboardResponse:
    try:
        return await service.get_dashboard(db, identity)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error getting dashboard of {identity.email}: {e}")
        raise _internal_error("Failed to fetch dashboard data", e) from e


@router.get(
    "/student/pending-registrations",
    response_model=StudentRegistrationsResponse,
    summary="My Registration Requests",
)
async def get_pending_registrations(
    identity: CallerIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> StudentRegistrationsResponse:
    try:
        return await service.get_registrations(db, identity)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error getting registrations of {identity.email}: {e}")
        raise _internal_error("Failed to fetch registration requests", e) from e


@router.delete(
    "/student/chapters/{chapter_id}/leave",
    response_model=LeaveResponse,
    summary="Leave Chapter",
)
async def leave_chapter(
    chapter_id: str,
    identity: CallerIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> LeaveResponse:
    try:
        return await registration_service.leave(db, identity, chapter_id)
    except UnifyServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        logger.exception(f"Error leaving chapter {chapter_id} for {identity.email}: {e}")
        raise _internal_error("Failed to leave chapter", e) from e
