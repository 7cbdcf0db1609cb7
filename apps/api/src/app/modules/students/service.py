"""
Student Service

Read paths of the student portal. All of them are computed from the store
on every call.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import CallerIdentity
from app.modules.chapters.models import Chapter
from app.modules.chapters.repository import ChapterRepository
from app.modules.registrations import repository as registration_repository
from app.modules.registrations.models import RegistrationStatus
from app.modules.registrations.service import UserNotFoundError
from app.modules.students.schemas import (
    ChapterListing,
    ChapterListingResponse,
    DashboardChapter,
    DashboardStudent,
    MyChapter,
    MyChaptersResponse,
    StudentDashboardResponse,
    StudentDashboardStats,
    StudentProfileResponse,
    StudentRegistration,
    StudentRegistrationsResponse,
)
from app.modules.users.models import User
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

# Placeholder card content until chapters carry their own
DEFAULT_REQUIREMENTS = ["Active participation", "Regular attendance"]
DEFAULT_BENEFITS = ["Skill development", "Networking opportunities"]
DEFAULT_MEETING_SCHEDULE = "Weekly meetings"
DEFAULT_TAGS = ["student-organization"]


def _description(chapter: Chapter) -> str:
    return f"Managed by {chapter.head_name or 'Unassigned'}"


async def _require_user(db: AsyncSession, identity: CallerIdentity) -> User:
    user = await UserRepository.get_by_email(db, identity.email)
    if user is None:
        raise UserNotFoundError()
    return user


async def list_available_chapters(db: AsyncSession) -> ChapterListingResponse:
    """Active chapters, open or closed, as chapter cards."""
    chapters = await ChapterRepository.list_active(db)
    return ChapterListingResponse(
        chapters=[
            ChapterListing(
                id=chapter.chapter_id,
                name=chapter.chapter_name,
                description=_description(chapter),
                category="General",
                admin_id=chapter.chapter_id,
                admin_name=chapter.head_name,
                is_registration_open=bool(chapter.registration_open),
                member_count=chapter.members,
                requirements=DEFAULT_REQUIREMENTS,
                benefits=DEFAULT_BENEFITS,
                meeting_schedule=DEFAULT_MEETING_SCHEDULE,
                contact_email=chapter.head_email,
                tags=DEFAULT_TAGS,
                created_at=chapter.created_at,
                updated_at=chapter.updated_at,
            )
            for chapter in chapters
        ]
    )


async def get_my_chapters(db: AsyncSession, identity: CallerIdentity) -> MyChaptersResponse:
    """Chapters the caller has an approved request for. Deleted chapters are skipped."""
    user = await _require_user(db, identity)

    approved = [
        r
        for r in await registration_repository.list_by_user(db, user.user_id)
        if r.status == RegistrationStatus.APPROVED
    ]
    chapters = {
        c.chapter_id: c
        for c in await ChapterRepository.get_many_by_ids(db, [r.chapter_id for r in approved])
    }

    items = []
    for request in approved:
        chapter = chapters.get(request.chapter_id)
        if chapter is None:
            continue
        items.append(
            MyChapter(
                id=chapter.chapter_id,
                name=chapter.chapter_name,
                description=_description(chapter),
                member_count=chapter.members,
                head_name=chapter.head_name,
                head_email=chapter.head_email,
                status=chapter.status,
                joined_at=request.applied_at,
                approved_at=request.processed_at,
            )
        )
    return MyChaptersResponse(chapters=items)


async def get_dashboard(db: AsyncSession, identity: CallerIdentity) -> StudentDashboardResponse:
    """
    Dashboard built from the caller's ``registered_chapters`` set, not from
    registration requests, so it reflects the denormalized view.
    """
    user = await _require_user(db, identity)
    registered = list(user.registered_chapters or [])

    by_name = {c.chapter_name: c for c in await ChapterRepository.get_many_by_names(db, registered)}
    chapters = [by_name[name] for name in registered if name in by_name]

    return StudentDashboardResponse(
        student=DashboardStudent(
            name=user.name,
            email=user.email,
            sap_id=user.sap_id,
            year=user.year,
            registered_chapters_count=len(registered),
        ),
        chapters=[
            DashboardChapter(
                id=c.chapter_id,
                name=c.chapter_name,
                head_name=c.head_name,
                member_count=c.members,
            )
            for c in chapters
        ],
        stats=StudentDashboardStats(
            total_chapters=len(registered),
            upcoming_events=0,
            completed_events=0,
        ),
    )


async def get_registrations(
    db: AsyncSession, identity: CallerIdentity
) -> StudentRegistrationsResponse:
    """Every request the caller ever made, with per-status counts."""
    user = await _require_user(db, identity)
    requests = await registration_repository.list_by_user(db, user.user_id)

    def count(status: RegistrationStatus) -> int:
        return sum(1 for r in requests if r.status == status)

    return StudentRegistrationsResponse(
        registrations=[StudentRegistration.model_validate(r) for r in requests],
        total_count=len(requests),
        pending_count=count(RegistrationStatus.PENDING),
        approved_count=count(RegistrationStatus.APPROVED),
        rejected_count=count(RegistrationStatus.REJECTED),
        left_count=count(RegistrationStatus.LEFT),
        kicked_count=count(RegistrationStatus.KICKED),
    )


async def get_profile(db: AsyncSession, identity: CallerIdentity) -> StudentProfileResponse:
    user = await _require_user(db, identity)
    return StudentProfileResponse(
        name=user.name,
        email=user.email,
        sap_id=user.sap_id,
        year=user.year,
        registered_chapters=list(user.registered_chapters or []),
    )
