"""
Registration Service

The membership workflow: Apply, Decide, Kick and Leave.

Request lifecycle:
    pending -> approved | rejected       (Decide)
    approved -> kicked                   (Kick)
    approved -> left                     (Leave)

Each step touches several records (the request, the chapter's member
counter, the student's chapter set, the activity feed) and each record
write commits on its own. The status write is authoritative: if it fails
the request fails. The other writes are side effects: each is attempted
independently, a failure is logged and swallowed, and nothing written
before it is undone. Counter and set drift is repaired by the
reconciliation job in jobs.py.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.email import send_registration_decision, send_removed_from_chapter
from app.core.security import CallerIdentity
from app.modules.activities.models import ActivityType
from app.modules.activities.service import log_activity
from app.modules.chapters.repository import ChapterRepository
from app.modules.chapters.service import ChapterNotFoundError
from app.modules.registrations import repository
from app.modules.registrations.models import REGISTRATION_TRANSITIONS, RegistrationStatus
from app.modules.registrations.schemas import (
    ApplyRequest,
    ApplyResponse,
    DecisionResponse,
    KickResponse,
    LeaveResponse,
    RegistrationResponse,
)
from app.modules.shared import (
    AccessDeniedError,
    NotFoundError,
    ValidationError,
    generate_registration_id,
)
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

DEFAULT_KICK_REASON = "Removed by chapter head"

DECISION_STATUSES = REGISTRATION_TRANSITIONS[RegistrationStatus.PENDING]


# =============================================================================
# Exceptions
# =============================================================================


class SelfRegistrationOnlyError(AccessDeniedError):
    def __init__(self):
        super().__init__("Access denied. Can only register yourself.", "SELF_REGISTRATION_ONLY")


class UserNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("User not found", "USER_NOT_FOUND")


class StudentNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Student not found", "STUDENT_NOT_FOUND")


class RegistrationNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Registration not found", "REGISTRATION_NOT_FOUND")


class RegistrationClosedError(ValidationError):
    def __init__(self):
        super().__init__("Registration is closed for this chapter", "REGISTRATION_CLOSED")


class DuplicateRegistrationError(ValidationError):
    def __init__(self, status: RegistrationStatus):
        super().__init__(
            f"Registration request already exists with status: {status.value}",
            "DUPLICATE_REGISTRATION",
        )


class InvalidDecisionError(ValidationError):
    def __init__(self, status: str):
        super().__init__(
            "Invalid status. Must be 'approved' or 'rejected'",
            "INVALID_DECISION",
            details=f"Received: {status}",
        )


class NotAMemberError(ValidationError):
    def __init__(self, message: str):
        super().__init__(message, "NOT_A_MEMBER")


# =============================================================================
# Side effects
# =============================================================================


async def _add_membership(
    db: AsyncSession, user_id: str, chapter_id: str, chapter_name: str
) -> None:
    """Record an approval on the student's chapter set and the chapter counter."""
    try:
        await UserRepository.add_registered_chapter(db, user_id, chapter_name)
    except Exception as e:
        logger.error(f"Failed to add {chapter_name} to chapters of user {user_id}: {e}")
        await db.rollback()

    try:
        await ChapterRepository.increment_member_count(db, chapter_id)
    except Exception as e:
        logger.error(f"Failed to increment member count of chapter {chapter_id}: {e}")
        await db.rollback()


async def _remove_from_chapter_set(db: AsyncSession, user_id: str, chapter_name: str) -> None:
    try:
        await UserRepository.remove_registered_chapter(db, user_id, chapter_name)
    except Exception as e:
        logger.error(f"Failed to remove {chapter_name} from chapters of user {user_id}: {e}")
        await db.rollback()


async def _decrement_member_count(db: AsyncSession, chapter_id: str) -> None:
    try:
        await ChapterRepository.decrement_member_count(db, chapter_id)
    except Exception as e:
        logger.error(f"Failed to decrement member count of chapter {chapter_id}: {e}")
        await db.rollback()


# =============================================================================
# Workflow
# =============================================================================


async def apply(
    db: AsyncSession,
    identity: CallerIdentity,
    data: ApplyRequest,
) -> ApplyResponse:
    """
    Submit a registration request for the caller.

    Args:
        db: Database session
        identity: Authenticated caller; must be the student applying
        data: Chapter name and the student's email

    Returns:
        ApplyResponse with the new registration id

    Raises:
        SelfRegistrationOnlyError: If the caller applies for someone else
        UserNotFoundError: If no user has the student email
        ChapterNotFoundError: If no chapter has the given name
        RegistrationClosedError: If the chapter is not accepting requests
        DuplicateRegistrationError: If a pending or approved request exists
    """
    if identity.email != data.student_email:
        logger.warning(f"{identity.email} tried to register {data.student_email}")
        raise SelfRegistrationOnlyError()

    user = await UserRepository.get_by_email(db, data.student_email)
    if user is None:
        raise UserNotFoundError()

    chapter = await ChapterRepository.get_by_name(db, data.chapter_name)
    if chapter is None:
        raise ChapterNotFoundError()

    if not chapter.registration_open:
        raise RegistrationClosedError()

    # Check-then-insert: two concurrent applies can both pass this check
    existing = await repository.find_active(db, user.user_id, chapter.chapter_id)
    if existing is not None:
        logger.info(
            f"Duplicate application by {user.user_id} to {chapter.chapter_id} "
            f"(existing status: {existing.status.value})"
        )
        raise DuplicateRegistrationError(existing.status)

    registration_id = generate_registration_id(user.user_id, chapter.chapter_id)
    user_id, user_name = user.user_id, user.name
    chapter_id = chapter.chapter_id

    await repository.create(
        db,
        registration_id=registration_id,
        user_id=user_id,
        student_name=user_name,
        student_email=user.email,
        chapter_id=chapter_id,
        chapter_name=chapter.chapter_name,
        sap_id=user.sap_id,
        year=user.year,
    )
    logger.info(f"Registration {registration_id} submitted")

    await log_activity(
        db,
        ActivityType.REGISTRATION,
        f"New registration request from {user_name}",
        chapter_id=chapter_id,
        user_id=user_id,
        metadata={"registrationId": registration_id},
    )

    return ApplyResponse(
        message="Registration request submitted successfully. Awaiting chapter head approval.",
        registration_id=registration_id,
        chapter_name=data.chapter_name,
        student_name=data.student_name or user_name,
        status=RegistrationStatus.PENDING,
    )


async def decide(
    db: AsyncSession,
    registration_id: str,
    new_status: RegistrationStatus | str,
    acting_head_email: str,
    notes: str | None = None,
    acting_chapter_id: str | None = None,
) -> DecisionResponse:
    """
    Approve or reject a registration request.

    The status, processing stamp and notes are overwritten whatever the
    request's current status is, and the request's chapter is not checked
    against the acting head's chapter. On approval the student's chapter
    set and the chapter's member counter are updated best-effort, so
    approving the same request twice counts the member twice.

    Args:
        db: Database session
        registration_id: Request to decide
        new_status: "approved" or "rejected"
        acting_head_email: Email stamped into processed_by
        notes: Optional notes; kept as-is when omitted
        acting_chapter_id: The acting head's chapter, used for logging only

    Raises:
        InvalidDecisionError: If new_status is not approved/rejected
        RegistrationNotFoundError: If the request does not exist
    """
    try:
        status = RegistrationStatus(new_status)
    except ValueError:
        raise InvalidDecisionError(str(new_status)) from None
    if status not in DECISION_STATUSES:
        raise InvalidDecisionError(status.value)

    request = await repository.update_status(
        db, registration_id, status, processed_by=acting_head_email, notes=notes
    )
    if request is None:
        raise RegistrationNotFoundError()

    if acting_chapter_id and request.chapter_id != acting_chapter_id:
        logger.warning(
            f"{acting_head_email} (chapter {acting_chapter_id}) decided registration "
            f"{registration_id} of chapter {request.chapter_id}"
        )

    logger.info(f"Registration {registration_id} {status.value} by {acting_head_email}")

    updated = RegistrationResponse.model_validate(request)

    if status == RegistrationStatus.APPROVED:
        await _add_membership(db, updated.user_id, updated.chapter_id, updated.chapter_name)

    try:
        await send_registration_decision(
            to_email=updated.student_email,
            student_name=updated.student_name,
            chapter_name=updated.chapter_name,
            approved=status == RegistrationStatus.APPROVED,
            notes=notes,
        )
    except Exception as e:
        logger.warning(f"Failed to send decision email for {registration_id}: {e}")

    return DecisionResponse(
        message=f"Registration {status.value} successfully",
        registration_id=registration_id,
        updated_registration=updated,
    )


async def kick(
    db: AsyncSession,
    chapter_id: str,
    acting_head_email: str,
    student_email: str,
    reason: str | None = None,
) -> KickResponse:
    """
    Remove an approved member from the acting head's chapter.

    Writes, in order: drop the chapter from the student's set, mark the
    request kicked, decrement the member counter (never below zero), log a
    student_removed activity. Only the status write can fail the call.

    Raises:
        StudentNotFoundError: If no user has the student email
        NotAMemberError: If the student has no approved request here
        ChapterNotFoundError: If the head's chapter record is gone
    """
    student = await UserRepository.get_by_email(db, student_email)
    if student is None:
        raise StudentNotFoundError()

    membership = await repository.find_approved(db, student.user_id, chapter_id)
    if membership is None:
        raise NotAMemberError("Student is not a member of this chapter")

    chapter = await ChapterRepository.get_by_id(db, chapter_id)
    if chapter is None:
        raise ChapterNotFoundError()

    removal_reason = reason or DEFAULT_KICK_REASON
    # A swallowed failure rolls the session back and expires loaded rows
    user_id, name, email = student.user_id, student.name, student.email
    chapter_name = chapter.chapter_name
    registration_id = membership.registration_id

    await _remove_from_chapter_set(db, user_id, chapter_name)

    await repository.update_status(
        db,
        registration_id,
        RegistrationStatus.KICKED,
        processed_by=acting_head_email,
        notes=removal_reason,
    )
    logger.info(f"{user_id} removed from {chapter_id} by {acting_head_email}: {removal_reason}")

    await _decrement_member_count(db, chapter_id)

    await log_activity(
        db,
        ActivityType.STUDENT_REMOVED,
        f"{name} was removed from the chapter by chapter head",
        chapter_id=chapter_id,
        user_id=user_id,
        metadata={"removedBy": acting_head_email, "reason": removal_reason},
    )

    try:
        await send_removed_from_chapter(
            to_email=email,
            student_name=name,
            chapter_name=chapter_name,
            reason=removal_reason,
        )
    except Exception as e:
        logger.warning(f"Failed to send removal email to {user_id}: {e}")

    return KickResponse(
        message=f"Successfully removed {name} from {chapter_name}",
        student_name=name,
        chapter_name=chapter_name,
        reason=removal_reason,
    )


async def leave(db: AsyncSession, identity: CallerIdentity, chapter_id: str) -> LeaveResponse:
    """
    Let the caller leave a chapter they are an approved member of.

    Raises:
        UserNotFoundError: If the caller has no user record
        ChapterNotFoundError: If the chapter does not exist
        NotAMemberError: If the caller has no approved request here
    """
    user = await UserRepository.get_by_email(db, identity.email)
    if user is None:
        raise UserNotFoundError()

    chapter = await ChapterRepository.get_by_id(db, chapter_id)
    if chapter is None:
        raise ChapterNotFoundError()

    membership = await repository.find_approved(db, user.user_id, chapter_id)
    if membership is None:
        raise NotAMemberError("Not currently a member of this chapter")

    user_id, name = user.user_id, user.name
    chapter_name = chapter.chapter_name
    registration_id = membership.registration_id

    await repository.update_status(
        db,
        registration_id,
        RegistrationStatus.LEFT,
        processed_by=user.email,
    )
    logger.info(f"{user_id} left chapter {chapter_id}")

    await _remove_from_chapter_set(db, user_id, chapter_name)
    await _decrement_member_count(db, chapter_id)

    await log_activity(
        db,
        ActivityType.MEMBER_LEFT,
        f"{name} left the chapter",
        chapter_id=chapter_id,
        user_id=user_id,
        metadata={"registrationId": registration_id},
    )

    return LeaveResponse(message="Successfully left chapter", chapter_name=chapter_name)
