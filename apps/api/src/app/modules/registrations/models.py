"""
Registration Models

A RegistrationRequest records one student's application to one chapter
and every later transition of it. Requests are never deleted, so the
table doubles as the membership history.
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.modules.shared import utcnow


class RegistrationStatus(str, enum.Enum):
    """Status of a registration request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    KICKED = "kicked"
    LEFT = "left"


# Statuses that block a new application for the same (user, chapter)
ACTIVE_STATUSES = (RegistrationStatus.PENDING, RegistrationStatus.APPROVED)

# Intended lifecycle. Decide overwrites whatever status a request has and
# does not consult this table.
REGISTRATION_TRANSITIONS: dict[RegistrationStatus, tuple[RegistrationStatus, ...]] = {
    RegistrationStatus.PENDING: (RegistrationStatus.APPROVED, RegistrationStatus.REJECTED),
    RegistrationStatus.APPROVED: (RegistrationStatus.KICKED, RegistrationStatus.LEFT),
    RegistrationStatus.REJECTED: (),
    RegistrationStatus.KICKED: (),
    RegistrationStatus.LEFT: (),
}


class RegistrationRequest(Base):
    """
    Student registration request.

    Student and chapter fields are copied in at apply time so listings do
    not need to look the user or chapter up again.
    """

    __tablename__ = "registration_requests"

    registration_id: Mapped[str] = mapped_column(String(255), primary_key=True)

    user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    student_name: Mapped[str] = mapped_column(String(200), nullable=False)
    student_email: Mapped[str] = mapped_column(String(255), nullable=False)
    sap_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    year: Mapped[str | None] = mapped_column(String(20), nullable=True)

    chapter_id: Mapped[str] = mapped_column(String(100), nullable=False)
    chapter_name: Mapped[str] = mapped_column(String(200), nullable=False)

    status: Mapped[RegistrationStatus] = mapped_column(
        Enum(
            RegistrationStatus,
            name="registration_status",
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=RegistrationStatus.PENDING,
    )
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    processed_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_registration_requests_user_chapter", "user_id", "chapter_id"),
        Index("ix_registration_requests_chapter_status", "chapter_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<RegistrationRequest(id={self.registration_id}, status={self.status.value})>"
        )
