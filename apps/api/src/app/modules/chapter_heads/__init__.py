"""
Chapter Heads module - Chapter-head identity and portal.
"""

from app.modules.chapter_heads.models import ChapterHead
from app.modules.chapter_heads.repository import ChapterHeadRepository

__all__ = ["ChapterHead", "ChapterHeadRepository"]
