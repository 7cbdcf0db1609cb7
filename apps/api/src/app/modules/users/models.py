"""
User Models

Student profiles. Accounts and credentials live with the identity
provider; this table only holds what the membership workflow needs.
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.modules.shared import utcnow


class User(Base):
    """
    Student profile.

    ``registered_chapters`` is a JSON list used as a set of chapter *names*.
    It is a denormalized view of the student's approved registrations and
    may drift from them until the reconciliation job runs.
    """

    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    sap_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    year: Mapped[str | None] = mapped_column(String(20), nullable=True)

    registered_chapters: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id}, email={self.email})>"

    def is_registered_in(self, chapter_name: str) -> bool:
        return chapter_name in (self.registered_chapters or [])
