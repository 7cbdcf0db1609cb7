"""
Tests for the membership reconciliation job.
"""

from unittest.mock import AsyncMock, patch

import pytest

from app.modules.chapters.repository import ChapterRepository
from app.modules.registrations import repository
from app.modules.registrations.jobs import (
    JOB_ID_RECONCILE_MEMBERSHIP,
    reconcile_membership_with_session,
    register_registration_jobs,
)
from app.modules.registrations.models import RegistrationStatus
from app.modules.users.repository import UserRepository


async def _approved_request(db, registration_id, user_id, chapter_id, chapter_name):
    await repository.create(
        db,
        registration_id=registration_id,
        user_id=user_id,
        student_name=user_id.title(),
        student_email=f"{user_id}@unify.dev",
        chapter_id=chapter_id,
        chapter_name=chapter_name,
    )
    await repository.update_status(
        db, registration_id, RegistrationStatus.APPROVED, processed_by="head@unify.dev"
    )


@pytest.mark.usefixtures("chapter")
class TestReconcileMembership:
    @pytest.mark.asyncio
    async def test_consistent_store_is_left_alone(self, db, student):
        await _approved_request(db, "r1", "alice", "robotics", "Robotics")
        await ChapterRepository.set_member_count(db, "robotics", 1)
        await UserRepository.set_registered_chapters(db, "alice", ["Robotics"])

        results = await reconcile_membership_with_session(db)

        assert results["chapters_checked"] == 1
        assert results["users_checked"] == 1
        assert results["chapters_fixed"] == 0
        assert results["users_fixed"] == 0
        assert results["changes"] == []

    @pytest.mark.asyncio
    async def test_double_count_is_repaired(self, db, student):
        await _approved_request(db, "r1", "alice", "robotics", "Robotics")
        await ChapterRepository.set_member_count(db, "robotics", 2)
        await UserRepository.set_registered_chapters(db, "alice", ["Robotics"])

        results = await reconcile_membership_with_session(db)

        assert results["chapters_fixed"] == 1
        assert results["changes"] == ["chapter robotics: member_count 2 -> 1"]
        assert (await ChapterRepository.get_by_id(db, "robotics")).member_count == 1

    @pytest.mark.asyncio
    async def test_counts_approved_records_not_students(self, db, student):
        # A rejected request approved after a later one was approved
        await _approved_request(db, "r1", "alice", "robotics", "Robotics")
        await _approved_request(db, "r2", "alice", "robotics", "Robotics")
        await ChapterRepository.set_member_count(db, "robotics", 2)
        await UserRepository.set_registered_chapters(db, "alice", ["Robotics"])

        results = await reconcile_membership_with_session(db)

        assert results["chapters_fixed"] == 0
        assert results["users_fixed"] == 0
        assert (await ChapterRepository.get_by_id(db, "robotics")).member_count == 2

    @pytest.mark.asyncio
    async def test_missing_and_stale_chapter_names_are_repaired(self, db, student):
        await _approved_request(db, "r1", "alice", "robotics", "Robotics")
        await ChapterRepository.set_member_count(db, "robotics", 1)
        await UserRepository.set_registered_chapters(db, "alice", ["Chess"])

        results = await reconcile_membership_with_session(db)

        assert results["users_fixed"] == 1
        assert (await UserRepository.get_by_id(db, "alice")).registered_chapters == ["Robotics"]

    @pytest.mark.asyncio
    async def test_renamed_chapter_uses_current_name(self, db, student):
        await _approved_request(db, "r1", "alice", "robotics", "Robotics")
        await ChapterRepository.update(db, "robotics", chapter_name="Robotics Club")
        await ChapterRepository.set_member_count(db, "robotics", 1)
        await UserRepository.set_registered_chapters(db, "alice", ["Robotics"])

        await reconcile_membership_with_session(db)

        user = await UserRepository.get_by_id(db, "alice")
        assert user.registered_chapters == ["Robotics Club"]

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_run(self, db, student):
        await _approved_request(db, "r1", "alice", "robotics", "Robotics")
        await ChapterRepository.set_member_count(db, "robotics", 5)

        with patch(
            "app.modules.registrations.jobs.ChapterRepository.set_member_count",
            new=AsyncMock(side_effect=RuntimeError("write failed")),
        ):
            results = await reconcile_membership_with_session(db)

        assert results["errors"] == 1
        assert results["users_fixed"] == 1

    @pytest.mark.asyncio
    async def test_is_idempotent(self, db, student):
        await _approved_request(db, "r1", "alice", "robotics", "Robotics")

        first = await reconcile_membership_with_session(db)
        second = await reconcile_membership_with_session(db)

        assert (first["chapters_fixed"], first["users_fixed"]) == (1, 1)
        assert second["chapters_fixed"] + second["users_fixed"] == 0


def test_register_registration_jobs():
    with patch("app.modules.registrations.jobs.register_job") as mock_register:
        register_registration_jobs()

    assert mock_register.call_args.kwargs["job_id"] == JOB_ID_RECONCILE_MEMBERSHIP


@pytest.mark.asyncio
async def test_reconcile_endpoint_requires_admin(client, auth_headers):
    response = await client.post(
        "/admin/maintenance/reconcile-membership", headers=auth_headers("a@unify.dev")
    )

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.usefixtures("chapter")
async def test_reconcile_endpoint(client, db, auth_headers):
    await ChapterRepository.set_member_count(db, "robotics", 3)

    response = await client.post(
        "/admin/maintenance/reconcile-membership",
        headers=auth_headers("admin@unify.dev", groups=["admin"]),
    )

    assert response.status_code == 200
    assert response.json()["chaptersFixed"] == 1
    assert response.json()["changes"] == ["chapter robotics: member_count 3 -> 0"]
