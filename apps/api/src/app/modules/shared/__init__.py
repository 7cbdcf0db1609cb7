"""
Shared helpers - timestamps, identifiers and service errors.
"""

import secrets
import string
from datetime import UTC, datetime

from app.modules.shared.errors import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    UnifyServiceError,
    ValidationError,
)

_BASE36 = string.digits + string.ascii_lowercase


def utcnow() -> datetime:
    return datetime.now(UTC)


def epoch_millis(moment: datetime | None = None) -> int:
    return int((moment or utcnow()).timestamp() * 1000)


def generate_registration_id(user_id: str, chapter_id: str) -> str:
    """Registration ids look like ``{userId}-{chapterId}-{epochMillis}``."""
    return f"{user_id}-{chapter_id}-{epoch_millis()}"


def generate_activity_id() -> str:
    """Activity ids look like ``activity-{epochMillis}-{9 base36 chars}``."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"activity-{epoch_millis()}-{suffix}"


__all__ = [
    "AccessDeniedError",
    "ConflictError",
    "NotFoundError",
    "UnifyServiceError",
    "ValidationError",
    "epoch_millis",
    "generate_activity_id",
    "generate_registration_id",
    "utcnow",
]
