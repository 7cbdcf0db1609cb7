"""
Chapter Schemas

Request and response models for chapter administration.
"""

from datetime import datetime

from pydantic import EmailStr, Field, model_validator

from app.modules.chapters.models import ChapterStatus
from app.modules.shared.schemas import CamelModel


class ChapterCreate(CamelModel):
    """Request body for POST /admin/chapters."""

    chapter_name: str = Field(..., min_length=1, max_length=200)
    chapter_id: str | None = Field(None, min_length=1, max_length=100)
    head_email: EmailStr | None = None
    head_name: str | None = Field(None, max_length=200)


class ChapterUpdate(CamelModel):
    """Request body for PUT /admin/chapters/{chapterId}. Omitted fields are left alone."""

    chapter_name: str | None = Field(None, min_length=1, max_length=200)
    head_email: EmailStr | None = None
    head_name: str | None = Field(None, max_length=200)
    status: ChapterStatus | None = None
    registration_open: bool | None = None

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "ChapterUpdate":
        """chapterName, status and registrationOpen may be omitted but not cleared."""
        for field in ("chapter_name", "status", "registration_open"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class ChapterResponse(CamelModel):
    chapter_id: str
    chapter_name: str
    head_email: str | None = None
    head_name: str | None = None
    member_count: int | None = None
    status: ChapterStatus
    registration_open: bool
    created_at: datetime
    updated_at: datetime


class ChapterListResponse(CamelModel):
    chapters: list[ChapterResponse]
    total: int
    skip: int
    limit: int
