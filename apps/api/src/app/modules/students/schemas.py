"""
Student Schemas

Response models of the student portal.
"""

from datetime import datetime

from app.modules.chapters.models import ChapterStatus
from app.modules.registrations.models import RegistrationStatus
from app.modules.shared.schemas import CamelModel


class ChapterListing(CamelModel):
    """A chapter card in the student chapter browser."""

    id: str
    name: str
    description: str
    category: str = "General"
    admin_id: str
    admin_name: str | None = None
    is_registration_open: bool
    member_count: int
    requirements: list[str]
    benefits: list[str]
    meeting_schedule: str
    contact_email: str | None = None
    tags: list[str]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ChapterListingResponse(CamelModel):
    chapters: list[ChapterListing]


class MyChapter(CamelModel):
    id: str
    name: str
    description: str
    member_count: int
    head_name: str | None = None
    head_email: str | None = None
    status: ChapterStatus
    joined_at: datetime
    approved_at: datetime | None = None


class MyChaptersResponse(CamelModel):
    chapters: list[MyChapter]


class DashboardStudent(CamelModel):
    name: str
    email: str
    sap_id: str | None = None
    year: str | None = None
    registered_chapters_count: int


class DashboardChapter(CamelModel):
    id: str
    name: str
    head_name: str | None = None
    member_count: int


class StudentDashboardStats(CamelModel):
    total_chapters: int
    upcoming_events: int = 0
    completed_events: int = 0


class StudentDashboardResponse(CamelModel):
    student: DashboardStudent
    chapters: list[DashboardChapter]
    stats: StudentDashboardStats


class StudentRegistration(CamelModel):
    registration_id: str
    chapter_id: str
    chapter_name: str
    status: RegistrationStatus
    applied_at: datetime
    processed_at: datetime | None = None
    processed_by: str | None = None
    notes: str | None = None


class StudentRegistrationsResponse(CamelModel):
    registrations: list[StudentRegistration]
    total_count: int
    pending_count: int
    approved_count: int
    rejected_count: int
    left_count: int
    kicked_count: int


class StudentProfileResponse(CamelModel):
    name: str
    email: str
    sap_id: str | None = None
    year: str | None = None
    registered_chapters: list[str]
