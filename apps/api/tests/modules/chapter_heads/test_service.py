"""
Tests for chapter-head resolution and the chapter-head request gate.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import HTTPException

from app.core.security import CallerIdentity
from app.modules.chapter_heads.repository import ChapterHeadRepository
from app.modules.chapter_heads.service import (
    CHAPTER_CONTEXT_HINT,
    ChapterAccessDeniedError,
    ChapterHeadContext,
    MissingLookupKeyError,
    check_membership,
    get_current_chapter_head,
    list_registrations,
    resolve_chapter_context,
    toggle_registration,
)
from app.modules.registrations.service import UserNotFoundError
from tests.conftest import HEAD_EMAIL


@pytest.mark.usefixtures("chapter")
class TestResolveChapterContext:
    @pytest.mark.asyncio
    async def test_linked_record_is_returned_as_is(self, db, chapter_head):
        context = await resolve_chapter_context(db, chapter_head)

        assert context == ChapterHeadContext(
            email=HEAD_EMAIL,
            chapter_id="robotics",
            chapter_name="Robotics",
            head_name="Robotics Head",
        )

    @pytest.mark.asyncio
    async def test_resolves_by_chapter_name_and_persists(self, db):
        head = await ChapterHeadRepository.upsert(db, email=HEAD_EMAIL, chapter_name="Robotics")

        context = await resolve_chapter_context(db, head)

        assert context.chapter_id == "robotics"
        stored = await ChapterHeadRepository.get_by_email(db, HEAD_EMAIL)
        assert stored.chapter_id == "robotics"
        assert stored.chapter_name == "Robotics"

    @pytest.mark.asyncio
    async def test_resolves_legacy_list_entry_as_id(self, db):
        head = await ChapterHeadRepository.upsert(db, email=HEAD_EMAIL, chapters=["robotics"])

        context = await resolve_chapter_context(db, head)

        assert context.chapter_id == "robotics"
        assert context.chapter_name == "Robotics"

    @pytest.mark.asyncio
    async def test_resolves_legacy_list_entry_as_name(self, db):
        head = await ChapterHeadRepository.upsert(db, email=HEAD_EMAIL, chapters=["Robotics"])

        context = await resolve_chapter_context(db, head)

        assert context.chapter_id == "robotics"

    @pytest.mark.asyncio
    async def test_unknown_name_falls_through_to_list(self, db):
        head = await ChapterHeadRepository.upsert(
            db, email=HEAD_EMAIL, chapter_name="Old Name", chapters=["robotics"]
        )

        context = await resolve_chapter_context(db, head)

        assert context.chapter_id == "robotics"
        assert context.chapter_name == "Robotics"

    @pytest.mark.asyncio
    async def test_unresolvable(self, db):
        head = await ChapterHeadRepository.upsert(db, email=HEAD_EMAIL, chapters=["chess"])

        context = await resolve_chapter_context(db, head)

        assert context.chapter_id is None

    @pytest.mark.asyncio
    async def test_lookup_errors_leave_context_unresolved(self, db):
        head = await ChapterHeadRepository.upsert(db, email=HEAD_EMAIL, chapter_name="Robotics")

        with patch(
            "app.modules.chapter_heads.service.ChapterRepository.get_by_name",
            new=AsyncMock(side_effect=RuntimeError("store down")),
        ):
            context = await resolve_chapter_context(db, head)

        assert context.chapter_id is None

    @pytest.mark.asyncio
    async def test_persist_failure_still_resolves(self, db):
        head = await ChapterHeadRepository.upsert(db, email=HEAD_EMAIL, chapter_name="Robotics")

        with patch(
            "app.modules.chapter_heads.service.ChapterHeadRepository.link_chapter",
            new=AsyncMock(side_effect=RuntimeError("write failed")),
        ):
            context = await resolve_chapter_context(db, head)

        assert context.chapter_id == "robotics"


@pytest.mark.usefixtures("chapter")
class TestGetCurrentChapterHead:
    @pytest.mark.asyncio
    async def test_not_a_chapter_head(self, db):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_chapter_head(CallerIdentity(email="alice@unify.dev"), db)

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == {"error": "Access denied. User is not a chapter head."}

    @pytest.mark.asyncio
    async def test_unresolvable_chapter(self, db):
        await ChapterHeadRepository.upsert(db, email=HEAD_EMAIL)

        with pytest.raises(HTTPException) as exc_info:
            await get_current_chapter_head(CallerIdentity(email=HEAD_EMAIL), db)

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail["details"] == CHAPTER_CONTEXT_HINT

    @pytest.mark.asyncio
    async def test_linked_head(self, db, chapter_head):
        context = await get_current_chapter_head(CallerIdentity(email=HEAD_EMAIL), db)

        assert context.chapter_id == "robotics"


@pytest.fixture
def head_context():
    return ChapterHeadContext(email=HEAD_EMAIL, chapter_id="robotics", chapter_name="Robotics")


class TestChapterScope:
    @pytest.mark.asyncio
    async def test_list_registrations_of_other_chapter(self, mock_db, head_context):
        with pytest.raises(ChapterAccessDeniedError) as exc_info:
            await list_registrations(mock_db, head_context, chapter_id="chess")

        assert exc_info.value.message == "Access denied to requested chapter"

    @pytest.mark.asyncio
    async def test_toggle_other_chapter(self, mock_db, head_context):
        with pytest.raises(ChapterAccessDeniedError) as exc_info:
            await toggle_registration(mock_db, head_context, "chess", "open")

        assert exc_info.value.message == "Access denied. Can only modify your own chapter."


class TestCheckMembership:
    @pytest.mark.asyncio
    async def test_requires_a_lookup_key(self, mock_db, head_context):
        with pytest.raises(MissingLookupKeyError):
            await check_membership(mock_db, head_context)

    @pytest.mark.asyncio
    async def test_unknown_user(self, mock_db, head_context):
        with patch("app.modules.chapter_heads.service.UserRepository") as mock_users:
            mock_users.get_by_email = AsyncMock(return_value=None)

            with pytest.raises(UserNotFoundError):
                await check_membership(mock_db, head_context, email="ghost@unify.dev")

    @pytest.mark.asyncio
    async def test_user_id_takes_precedence(self, mock_db, head_context):
        with (
            patch("app.modules.chapter_heads.service.UserRepository") as mock_users,
            patch("app.modules.chapter_heads.service.registration_repository") as mock_repo,
        ):
            mock_users.get_by_id = AsyncMock(
                return_value=SimpleNamespace(user_id="alice", email="alice@unify.dev", name="Alice")
            )
            mock_users.get_by_email = AsyncMock()
            mock_repo.find_approved = AsyncMock(return_value=None)

            result = await check_membership(
                mock_db, head_context, user_id="alice", email="other@unify.dev"
            )

        mock_users.get_by_email.assert_not_called()
        assert result.is_member is False
        assert result.chapter_id == "robotics"
