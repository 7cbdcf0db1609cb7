"""
Chapter Head Models

Links a chapter head's email to the chapter they manage.
"""

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class ChapterHead(Base):
    """
    Chapter head record, keyed by email.

    Older records may lack ``chapter_id`` and carry only a chapter name or a
    ``chapters`` list; the chapter-head service resolves and backfills them.
    """

    __tablename__ = "chapter_heads"

    email: Mapped[str] = mapped_column(String(255), primary_key=True)
    chapter_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    chapter_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    chapters: Mapped[list | None] = mapped_column(JSON, nullable=True)
    head_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    def __repr__(self) -> str:
        return f"<ChapterHead(email={self.email}, chapter_id={self.chapter_id})>"
