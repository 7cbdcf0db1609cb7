"""
Activity Models

Append-only feed of membership events shown on the chapter-head dashboard.
"""

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.modules.shared import utcnow


class ActivityType(str, enum.Enum):
    REGISTRATION = "registration"
    STUDENT_REMOVED = "student_removed"
    MEMBER_LEFT = "member_left"


class Activity(Base):
    """A single membership event. Never updated or deleted."""

    __tablename__ = "activities"

    activity_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    type: Mapped[ActivityType] = mapped_column(
        Enum(
            ActivityType,
            name="activity_type",
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    chapter_id: Mapped[str] = mapped_column(String(100), nullable=False)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False)

    # "metadata" is reserved on declarative classes
    activity_metadata: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)

    __table_args__ = (Index("ix_activities_chapter_timestamp", "chapter_id", "timestamp"),)
