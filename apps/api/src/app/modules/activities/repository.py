"""
Activity Repository

Insert and read activity records.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.activities.models import Activity, ActivityType
from app.modules.shared import generate_activity_id


async def create(
    db: AsyncSession,
    *,
    activity_type: ActivityType,
    message: str,
    chapter_id: str,
    user_id: str,
    metadata: dict[str, Any] | None = None,
) -> Activity:
    activity = Activity(
        activity_id=generate_activity_id(),
        type=activity_type,
        message=message,
        chapter_id=chapter_id,
        user_id=user_id,
        activity_metadata=metadata,
    )
    db.add(activity)
    await db.commit()
    await db.refresh(activity)
    return activity


async def list_by_chapter(db: AsyncSession, chapter_id: str, limit: int) -> list[Activity]:
    """The most recent activities for a chapter, newest first."""
    result = await db.execute(
        select(Activity)
        .where(Activity.chapter_id == chapter_id)
        .order_by(Activity.timestamp.desc())
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())
