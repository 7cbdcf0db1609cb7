"""
Registration Repository

Database operations for registration requests. Each write commits on its
own; the workflow in service.py composes several of them without a
surrounding transaction.

Reads pass ``populate_existing`` so a session that already holds a row
always sees the committed values.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.shared import utcnow

from .models import ACTIVE_STATUSES, RegistrationRequest, RegistrationStatus


def _fresh(query):
    return query.execution_options(populate_existing=True)


async def create(
    db: AsyncSession,
    *,
    registration_id: str,
    user_id: str,
    student_name: str,
    student_email: str,
    chapter_id: str,
    chapter_name: str,
    sap_id: str | None = None,
    year: str | None = None,
) -> RegistrationRequest:
    """Insert a new pending registration request."""
    request = RegistrationRequest(
        registration_id=registration_id,
        user_id=user_id,
        student_name=student_name,
        student_email=student_email,
        chapter_id=chapter_id,
        chapter_name=chapter_name,
        sap_id=sap_id,
        year=year,
        status=RegistrationStatus.PENDING,
        applied_at=utcnow(),
    )

    db.add(request)
    await db.commit()
    await db.refresh(request)

    return request


async def get_by_id(db: AsyncSession, registration_id: str) -> RegistrationRequest | None:
    result = await db.execute(
        _fresh(
            select(RegistrationRequest).where(
                RegistrationRequest.registration_id == registration_id
            )
        )
    )
    return result.scalar_one_or_none()


async def find_active(
    db: AsyncSession, user_id: str, chapter_id: str
) -> RegistrationRequest | None:
    """First pending or approved request for (user, chapter), if any."""
    result = await db.execute(
        _fresh(
            select(RegistrationRequest)
            .where(
                RegistrationRequest.user_id == user_id,
                RegistrationRequest.chapter_id == chapter_id,
                RegistrationRequest.status.in_(ACTIVE_STATUSES),
            )
            .order_by(RegistrationRequest.applied_at)
        )
    )
    return result.scalars().first()


async def find_approved(
    db: AsyncSession, user_id: str, chapter_id: str
) -> RegistrationRequest | None:
    """First approved request for (user, chapter), if any."""
    result = await db.execute(
        _fresh(
            select(RegistrationRequest)
            .where(
                RegistrationRequest.user_id == user_id,
                RegistrationRequest.chapter_id == chapter_id,
                RegistrationRequest.status == RegistrationStatus.APPROVED,
            )
            .order_by(RegistrationRequest.applied_at)
        )
    )
    return result.scalars().first()


async def list_by_chapter(db: AsyncSession, chapter_id: str) -> list[RegistrationRequest]:
    result = await db.execute(
        _fresh(
            select(RegistrationRequest)
            .where(RegistrationRequest.chapter_id == chapter_id)
            .order_by(RegistrationRequest.applied_at)
        )
    )
    return list(result.scalars().all())


async def list_by_user(db: AsyncSession, user_id: str) -> list[RegistrationRequest]:
    result = await db.execute(
        _fresh(
            select(RegistrationRequest)
            .where(RegistrationRequest.user_id == user_id)
            .order_by(RegistrationRequest.applied_at)
        )
    )
    return list(result.scalars().all())


async def list_by_status(
    db: AsyncSession, status: RegistrationStatus
) -> list[RegistrationRequest]:
    result = await db.execute(
        _fresh(select(RegistrationRequest).where(RegistrationRequest.status == status))
    )
    return list(result.scalars().all())


async def update_status(
    db: AsyncSession,
    registration_id: str,
    status: RegistrationStatus,
    processed_by: str,
    notes: str | None = None,
) -> RegistrationRequest | None:
    """
    Overwrite a request's status and processing stamp.

    The current status is not checked. ``notes`` replaces the stored value
    only when given.

    Returns:
        The updated request, or None if it does not exist
    """
    request = await get_by_id(db, registration_id)
    if request is None:
        return None

    request.status = status
    request.processed_at = utcnow()
    request.processed_by = processed_by
    if notes:
        request.notes = notes

    await db.commit()
    await db.refresh(request)

    return request
