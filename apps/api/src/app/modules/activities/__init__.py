"""
Activities module - Membership event feed.
"""

from app.modules.activities.models import Activity, ActivityType

__all__ = ["Activity", "ActivityType"]
