"""
Chapter Head Schemas

Request and response models for the chapter-head portal and chapter-head
administration.
"""

from datetime import datetime
from typing import Literal

from pydantic import EmailStr, Field

from app.modules.activities.models import ActivityType
from app.modules.chapters.models import ChapterStatus
from app.modules.chapters.schemas import ChapterResponse
from app.modules.registrations.schemas import RegistrationResponse
from app.modules.shared.schemas import CamelModel


class HeadChapter(CamelModel):
    """The head's chapter as shown on the head portal."""

    chapter_id: str
    chapter_name: str
    created_at: datetime | None = None
    head_email: str | None = None
    head_name: str | None = None
    member_count: int = 0
    status: ChapterStatus = ChapterStatus.ACTIVE
    updated_at: datetime | None = None
    registration_status: Literal["open", "closed"]


class HeadChaptersResponse(CamelModel):
    chapters: list[HeadChapter]


class HeadProfileResponse(CamelModel):
    """The caller's chapter head record with its resolved chapter."""

    email: str
    chapter_id: str
    chapter_name: str | None = None
    head_name: str | None = None


class HeadDashboardStats(CamelModel):
    total_chapters: int = 1
    total_members: int
    pending_registrations: int
    active_events: int = 0
    recent_registrations: int


class HeadDashboardResponse(CamelModel):
    stats: HeadDashboardStats


class RegistrationWithMembership(RegistrationResponse):
    is_member: bool


class HeadRegistrationsResponse(CamelModel):
    registrations: list[RegistrationWithMembership]


class ToggleRegistrationRequest(CamelModel):
    """Request body for PUT /chapterhead/toggle-registration."""

    chapter_id: str
    status: Literal["open", "closed"]


class ToggleRegistrationResponse(CamelModel):
    message: str
    chapter: ChapterResponse


class MembershipCheckResponse(CamelModel):
    user_id: str
    email: str
    name: str
    is_member: bool
    chapter_id: str


class ActivityItem(CamelModel):
    id: str
    type: ActivityType
    message: str
    timestamp: datetime
    chapter_id: str
    user_id: str


class ActivitiesResponse(CamelModel):
    activities: list[ActivityItem]


# =============================================================================
# Admin
# =============================================================================


class ChapterHeadAssign(CamelModel):
    """Request body for POST /admin/chapter-heads."""

    email: EmailStr
    chapter_id: str = Field(..., min_length=1)
    head_name: str | None = Field(None, max_length=200)


class ChapterHeadResponse(CamelModel):
    email: str
    chapter_id: str | None = None
    chapter_name: str | None = None
    chapters: list[str] | None = None
    head_name: str | None = None


class ChapterHeadListResponse(CamelModel):
    chapter_heads: list[ChapterHeadResponse]
    total: int
