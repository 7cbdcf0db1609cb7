"""
Seed Demo Data

Creates a small data set for local development: one open chapter, its
chapter head, and one student. Safe to run more than once.

Usage:
    pip install -e .
    python apps/api/scripts/seed_demo_data.py
"""

import asyncio

from app.core.database import async_session_maker, close_db, init_db
from app.modules.chapter_heads.repository import ChapterHeadRepository
from app.modules.chapters.repository import ChapterRepository
from app.modules.users.repository import UserRepository

CHAPTER_ID = "robotics"
CHAPTER_NAME = "Robotics"
HEAD_EMAIL = "head@unify.dev"
HEAD_NAME = "Robotics Head"
STUDENT_ID = "alice"
STUDENT_EMAIL = "alice@unify.dev"


async def seed_demo_data() -> None:
    """Create the demo chapter, chapter head and student if missing."""
    await init_db()

    async with async_session_maker() as db:
        chapter = await ChapterRepository.get_by_id(db, CHAPTER_ID)
        if chapter is None:
            chapter = await ChapterRepository.create(
                db,
                chapter_id=CHAPTER_ID,
                chapter_name=CHAPTER_NAME,
                head_email=HEAD_EMAIL,
                head_name=HEAD_NAME,
                registration_open=True,
            )
            print(f"Chapter created: {chapter.chapter_name} ({chapter.chapter_id})")
        else:
            print(f"Chapter already exists: {chapter.chapter_name}")

        await ChapterHeadRepository.upsert(
            db,
            email=HEAD_EMAIL,
            chapter_id=CHAPTER_ID,
            chapter_name=CHAPTER_NAME,
            head_name=HEAD_NAME,
        )
        print(f"Chapter head: {HEAD_EMAIL}")

        if await UserRepository.get_by_id(db, STUDENT_ID) is None:
            await UserRepository.create(
                db,
                user_id=STUDENT_ID,
                name="Alice",
                email=STUDENT_EMAIL,
                sap_id="500100",
                year="2",
            )
            print(f"Student created: {STUDENT_EMAIL}")
        else:
            print(f"Student already exists: {STUDENT_EMAIL}")

    await close_db()


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
