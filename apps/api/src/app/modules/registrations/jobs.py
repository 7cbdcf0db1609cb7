"""
Registration Background Jobs

Membership reconciliation. Approved registration requests are the source
of truth for membership; each chapter's ``member_count`` and each
student's ``registered_chapters`` are denormalized copies that the
workflow updates best-effort and can drift (double approvals, failed side
effects, chapter renames).

The job:
- sets every chapter's member count to its number of approved requests
- rebuilds every student's chapter-name set from approved requests
- reports every change it made

It is idempotent, opens its own database session, and keeps going when a
single chapter or user fails.
"""

import logging
from collections import Counter, defaultdict
from typing import Any

from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import async_session_maker
from app.core.scheduler import register_job
from app.modules.chapters.repository import ChapterRepository
from app.modules.registrations import repository
from app.modules.registrations.models import RegistrationStatus
from app.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

JOB_ID_RECONCILE_MEMBERSHIP = "registrations_reconcile_membership"


async def reconcile_membership_with_session(db: AsyncSession) -> dict[str, Any]:
    """
    Reconcile counters and chapter sets using an existing session.

    Returns:
        Dict with chapters_checked, chapters_fixed, users_checked,
        users_fixed, errors, and a human-readable list of changes
    """
    results: dict[str, Any] = {
        "chapters_checked": 0,
        "chapters_fixed": 0,
        "users_checked": 0,
        "users_fixed": 0,
        "errors": 0,
        "changes": [],
    }

    approved = await repository.list_by_status(db, RegistrationStatus.APPROVED)
    chapters, _ = await ChapterRepository.list_all(db)
    names_by_id = {chapter.chapter_id: chapter.chapter_name for chapter in chapters}

    approved_by_chapter: Counter[str] = Counter()
    chapters_by_user: dict[str, list[str]] = defaultdict(list)
    for request in approved:
        approved_by_chapter[request.chapter_id] += 1
        # Prefer the chapter's current name so renamed chapters heal too
        name = names_by_id.get(request.chapter_id, request.chapter_name)
        if name not in chapters_by_user[request.user_id]:
            chapters_by_user[request.user_id].append(name)

    # A rollback expires loaded objects, so work from plain values
    chapter_counts = [(chapter.chapter_id, chapter.member_count) for chapter in chapters]
    user_sets = [
        (user.user_id, list(user.registered_chapters or []))
        for user in await UserRepository.list_all(db)
    ]

    for chapter_id, member_count in chapter_counts:
        results["chapters_checked"] += 1
        expected = approved_by_chapter[chapter_id]
        if member_count == expected:
            continue
        try:
            await ChapterRepository.set_member_count(db, chapter_id, expected)
            results["chapters_fixed"] += 1
            results["changes"].append(
                f"chapter {chapter_id}: member_count {member_count} -> {expected}"
            )
        except Exception as e:
            logger.error(f"Failed to reconcile chapter {chapter_id}: {e}")
            await db.rollback()
            results["errors"] += 1

    for user_id, current in user_sets:
        results["users_checked"] += 1
        expected_names = chapters_by_user.get(user_id, [])
        if sorted(current) == sorted(expected_names):
            continue

        # Keep the existing order for entries that stay
        rebuilt = [name for name in current if name in expected_names]
        rebuilt += [name for name in expected_names if name not in rebuilt]
        try:
            await UserRepository.set_registered_chapters(db, user_id, rebuilt)
            results["users_fixed"] += 1
            results["changes"].append(f"user {user_id}: chapters {current} -> {rebuilt}")
        except Exception as e:
            logger.error(f"Failed to reconcile chapters of user {user_id}: {e}")
            await db.rollback()
            results["errors"] += 1

    return results


async def reconcile_membership() -> dict[str, Any]:
    """Scheduled entry point: reconcile membership in a fresh session."""
    logger.info("Starting membership reconciliation")

    async with async_session_maker() as db:
        results = await reconcile_membership_with_session(db)

    logger.info(
        f"Membership reconciliation completed. "
        f"Chapters fixed: {results['chapters_fixed']}/{results['chapters_checked']}, "
        f"users fixed: {results['users_fixed']}/{results['users_checked']}, "
        f"errors: {results['errors']}"
    )
    return results


def register_registration_jobs() -> None:
    """
    Register registration background jobs with the scheduler.

    Call during application startup, before the scheduler is started.
    """
    interval = settings.membership_reconcile_interval_minutes
    register_job(
        job_id=JOB_ID_RECONCILE_MEMBERSHIP,
        func=reconcile_membership,
        trigger=IntervalTrigger(minutes=interval),
    )
    logger.info(f"Registered job: {JOB_ID_RECONCILE_MEMBERSHIP} (interval: {interval} minutes)")
