"""
Chapter Models

Student organizations that students register into.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.modules.shared import utcnow


class ChapterStatus(str, enum.Enum):
    """Whether a chapter is listed to students."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class Chapter(Base):
    """
    Student chapter.

    ``member_count`` is a denormalized counter of approved members. It is
    nullable: a missing counter is treated as 0 by the increment, and the
    reconciliation job rewrites it from approved registrations.
    """

    __tablename__ = "chapters"

    chapter_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    chapter_name: Mapped[str] = mapped_column(String(200), unique=True, index=True, nullable=False)

    head_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    head_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    member_count: Mapped[int | None] = mapped_column(Integer, nullable=True, default=0)
    status: Mapped[ChapterStatus] = mapped_column(
        Enum(
            ChapterStatus,
            name="chapter_status",
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=ChapterStatus.ACTIVE,
    )
    registration_open: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Chapter(chapter_id={self.chapter_id}, name={self.chapter_name})>"

    @property
    def members(self) -> int:
        return self.member_count or 0
