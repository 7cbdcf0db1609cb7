"""
HTTP tests for the chapter-head portal.
"""

import pytest

from app.modules.chapter_heads.repository import ChapterHeadRepository
from app.modules.registrations import repository
from app.modules.registrations.models import RegistrationStatus
from tests.conftest import HEAD_EMAIL, STUDENT_EMAIL


async def _pending_request(db, registration_id="alice-robotics-1"):
    return await repository.create(
        db,
        registration_id=registration_id,
        user_id="alice",
        student_name="Alice",
        student_email=STUDENT_EMAIL,
        chapter_id="robotics",
        chapter_name="Robotics",
    )


@pytest.mark.usefixtures("chapter_head", "student")
class TestHeadPortal:
    @pytest.mark.asyncio
    async def test_profile(self, client, auth_headers):
        response = await client.post("/chapterhead-profile", headers=auth_headers(HEAD_EMAIL))

        assert response.status_code == 200
        assert response.json() == {
            "email": HEAD_EMAIL,
            "chapterId": "robotics",
            "chapterName": "Robotics",
            "headName": "Robotics Head",
        }

    @pytest.mark.asyncio
    async def test_my_chapters(self, client, auth_headers):
        response = await client.get("/chapterhead/my-chapters", headers=auth_headers(HEAD_EMAIL))

        assert response.status_code == 200
        [chapter] = response.json()["chapters"]
        assert chapter["chapterId"] == "robotics"
        assert chapter["registrationStatus"] == "open"
        assert chapter["memberCount"] == 0

    @pytest.mark.asyncio
    async def test_dashboard_counts(self, client, db, auth_headers):
        await _pending_request(db, "r1")
        await _pending_request(db, "r2")
        await repository.update_status(db, "r2", RegistrationStatus.APPROVED, HEAD_EMAIL)

        response = await client.get("/chapterhead/dashboard", headers=auth_headers(HEAD_EMAIL))

        assert response.status_code == 200
        assert response.json()["stats"] == {
            "totalChapters": 1,
            "totalMembers": 0,
            "pendingRegistrations": 1,
            "activeEvents": 0,
            "recentRegistrations": 1,
        }

    @pytest.mark.asyncio
    async def test_registrations_flag_members(self, client, db, auth_headers):
        await _pending_request(db, "r1")
        await repository.update_status(db, "r1", RegistrationStatus.APPROVED, HEAD_EMAIL)

        response = await client.get(
            "/chapterhead/registrations/robotics", headers=auth_headers(HEAD_EMAIL)
        )

        assert response.status_code == 200
        [registration] = response.json()["registrations"]
        assert registration["isMember"] is True
        assert registration["studentEmail"] == STUDENT_EMAIL

    @pytest.mark.asyncio
    async def test_registrations_of_other_chapter(self, client, auth_headers):
        response = await client.get(
            "/chapterhead/registrations/chess", headers=auth_headers(HEAD_EMAIL)
        )

        assert response.status_code == 403
        assert response.json() == {"error": "Access denied to requested chapter"}

    @pytest.mark.asyncio
    async def test_toggle_registration(self, client, auth_headers):
        response = await client.put(
            "/chapterhead/toggle-registration",
            json={"chapterId": "robotics", "status": "closed"},
            headers=auth_headers(HEAD_EMAIL),
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Registration closed successfully"
        assert response.json()["chapter"]["registrationOpen"] is False

    @pytest.mark.asyncio
    async def test_toggle_other_chapter(self, client, auth_headers):
        response = await client.put(
            "/chapterhead/toggle-registration",
            json={"chapterId": "chess", "status": "open"},
            headers=auth_headers(HEAD_EMAIL),
        )

        assert response.status_code == 403
        assert response.json() == {"error": "Access denied. Can only modify your own chapter."}

    @pytest.mark.asyncio
    async def test_check_membership_by_email(self, client, auth_headers):
        response = await client.get(
            "/chapterhead/check-membership",
            params={"email": STUDENT_EMAIL},
            headers=auth_headers(HEAD_EMAIL),
        )

        assert response.status_code == 200
        assert response.json() == {
            "userId": "alice",
            "email": STUDENT_EMAIL,
            "name": "Alice",
            "isMember": False,
            "chapterId": "robotics",
        }

    @pytest.mark.asyncio
    async def test_check_membership_by_user_id(self, client, db, auth_headers):
        await _pending_request(db, "r1")
        await repository.update_status(db, "r1", RegistrationStatus.APPROVED, HEAD_EMAIL)

        response = await client.get(
            "/chapterhead/check-membership",
            params={"userId": "alice"},
            headers=auth_headers(HEAD_EMAIL),
        )

        assert response.json()["isMember"] is True

    @pytest.mark.asyncio
    async def test_check_membership_without_key(self, client, auth_headers):
        response = await client.get(
            "/chapterhead/check-membership", headers=auth_headers(HEAD_EMAIL)
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Either userId or email parameter is required"}

    @pytest.mark.asyncio
    async def test_activities_newest_first(self, client, auth_headers):
        await client.post(
            "/register-student",
            json={"chapterName": "Robotics", "studentEmail": STUDENT_EMAIL},
            headers=auth_headers(STUDENT_EMAIL),
        )

        response = await client.get("/chapterhead/activities", headers=auth_headers(HEAD_EMAIL))

        assert response.status_code == 200
        [activity] = response.json()["activities"]
        assert activity["type"] == "registration"
        assert activity["message"] == "New registration request from Alice"
        assert activity["id"].startswith("activity-")


@pytest.mark.asyncio
@pytest.mark.usefixtures("student")
async def test_student_is_not_a_chapter_head(client, auth_headers):
    response = await client.get("/chapterhead/dashboard", headers=auth_headers(STUDENT_EMAIL))

    assert response.status_code == 403
    assert response.json() == {"error": "Access denied. User is not a chapter head."}


@pytest.mark.asyncio
@pytest.mark.usefixtures("chapter")
async def test_legacy_head_is_resolved_on_first_request(client, db, auth_headers):
    await ChapterHeadRepository.upsert(db, email=HEAD_EMAIL, chapters=["Robotics"])

    response = await client.get("/chapterhead/my-chapters", headers=auth_headers(HEAD_EMAIL))

    assert response.status_code == 200
    stored = await ChapterHeadRepository.get_by_email(db, HEAD_EMAIL)
    assert stored.chapter_id == "robotics"


@pytest.mark.asyncio
async def test_unlinked_head(client, db, auth_headers):
    await ChapterHeadRepository.upsert(db, email=HEAD_EMAIL)

    response = await client.get("/chapterhead/my-chapters", headers=auth_headers(HEAD_EMAIL))

    assert response.status_code == 400
    assert response.json()["error"] == "Chapter context not linked to chapter head"


@pytest.mark.asyncio
@pytest.mark.usefixtures("chapter")
async def test_profile_resolves_legacy_head(client, db, auth_headers):
    await ChapterHeadRepository.upsert(db, email=HEAD_EMAIL, chapter_name="Robotics")

    response = await client.post(
        "/chapterhead-profile", json={"email": HEAD_EMAIL}, headers=auth_headers(HEAD_EMAIL)
    )

    assert response.status_code == 200
    assert response.json()["chapterId"] == "robotics"


@pytest.mark.asyncio
@pytest.mark.usefixtures("student")
async def test_profile_of_non_head(client, auth_headers):
    response = await client.post("/chapterhead-profile", headers=auth_headers(STUDENT_EMAIL))

    assert response.status_code == 403
