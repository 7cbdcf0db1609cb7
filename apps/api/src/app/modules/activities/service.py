"""
Activity Service

Activity writes are a side effect of the membership workflow: a failure is
logged and never fails the request that triggered it.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.activities import repository
from app.modules.activities.models import Activity, ActivityType

logger = logging.getLogger(__name__)


async def log_activity(
    db: AsyncSession,
    activity_type: ActivityType,
    message: str,
    chapter_id: str,
    user_id: str,
    metadata: dict[str, Any] | None = None,
) -> Activity | None:
    """
    Append an activity record.

    Returns:
        The stored Activity, or None if the write failed
    """
    try:
        return await repository.create(
            db,
            activity_type=activity_type,
            message=message,
            chapter_id=chapter_id,
            user_id=user_id,
            metadata=metadata,
        )
    except Exception as e:
        logger.error(
            f"Failed to record {activity_type.value} activity for chapter {chapter_id}: {e}"
        )
        await db.rollback()
        return None


async def recent_activities(db: AsyncSession, chapter_id: str, limit: int = 10) -> list[Activity]:
    """Activities for a chapter, newest first, truncated to ``limit``."""
    return await repository.list_by_chapter(db, chapter_id, limit)
