"""
Registration Schemas

Request and response models for the membership workflow.
"""

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.modules.registrations.models import RegistrationStatus
from app.modules.shared.schemas import CamelModel

# Outcomes a chapter head may choose when deciding a request
RegistrationDecision = Literal["approved", "rejected"]


class RegistrationResponse(CamelModel):
    """A registration request as stored."""

    registration_id: str
    user_id: str
    student_name: str
    student_email: str
    chapter_id: str
    chapter_name: str
    status: RegistrationStatus
    applied_at: datetime
    processed_at: datetime | None = None
    processed_by: str | None = None
    notes: str | None = None
    sap_id: str | None = None
    year: str | None = None


class ApplyRequest(CamelModel):
    """Request body for POST /register-student."""

    chapter_name: str = Field(..., min_length=1)
    student_email: str = Field(..., min_length=1)
    student_name: str | None = None


class ApplyResponse(CamelModel):
    message: str
    registration_id: str
    chapter_name: str
    student_name: str | None = None
    status: RegistrationStatus = RegistrationStatus.PENDING


class DecisionRequest(CamelModel):
    """Request body for PUT /chapterhead/registration/{registrationId}."""

    status: RegistrationDecision
    notes: str | None = None


class DecisionResponse(CamelModel):
    message: str
    registration_id: str
    updated_registration: RegistrationResponse


class KickRequest(CamelModel):
    """Request body for DELETE /chapterhead/kick-student."""

    student_email: str = Field(..., min_length=1)
    reason: str | None = None


class KickResponse(CamelModel):
    message: str
    student_name: str
    chapter_name: str
    reason: str


class LeaveResponse(CamelModel):
    message: str
    chapter_name: str


class ReconcileResponse(CamelModel):
    """Summary of a membership reconciliation run."""

    chapters_checked: int
    chapters_fixed: int
    users_checked: int
    users_fixed: int
    errors: int
    changes: list[str]
