"""
Tests for shared identifier helpers and service errors.
"""

import re
from datetime import UTC, datetime

from app.modules.shared import (
    NotFoundError,
    ValidationError,
    epoch_millis,
    generate_activity_id,
    generate_registration_id,
)


def test_epoch_millis():
    assert epoch_millis(datetime(2024, 1, 1, tzinfo=UTC)) == 1_704_067_200_000


def test_registration_id_format():
    assert re.fullmatch(r"alice-robotics-\d{13}", generate_registration_id("alice", "robotics"))


def test_activity_id_format():
    assert re.fullmatch(r"activity-\d{13}-[0-9a-z]{9}", generate_activity_id())


def test_error_detail_omits_missing_details():
    assert NotFoundError("Chapter not found").to_detail() == {"error": "Chapter not found"}


def test_error_detail_includes_details():
    error = ValidationError("Invalid status", details="Received: kicked")

    assert error.status_code == 400
    assert error.to_detail() == {"error": "Invalid status", "details": "Received: kicked"}
