"""
Chapters module - Student chapters and their administration.
"""

from app.modules.chapters.models import Chapter, ChapterStatus
from app.modules.chapters.repository import ChapterRepository

__all__ = ["Chapter", "ChapterRepository", "ChapterStatus"]
