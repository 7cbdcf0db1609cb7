"""
Tests for the authentication dependencies and the app-wide error bodies.
"""

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from app.core.auth import get_current_admin, get_current_identity
from app.core.security import CallerIdentity
from tests.conftest import make_token


class TestGetCurrentIdentity:
    """Tests for get_current_identity."""

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_identity(None)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == {"error": "No authorization header"}

    @pytest.mark.asyncio
    async def test_undecodable_token(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="garbage")

        with pytest.raises(HTTPException) as exc_info:
            await get_current_identity(credentials)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == {"error": "Invalid token"}

    @pytest.mark.asyncio
    async def test_valid_token(self):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=make_token("a@unify.dev")
        )

        identity = await get_current_identity(credentials)

        assert identity.email == "a@unify.dev"


class TestGetCurrentAdmin:
    """Tests for get_current_admin."""

    @pytest.mark.asyncio
    async def test_admin_group_passes(self):
        identity = CallerIdentity(email="admin@unify.dev", groups=["admin"])

        assert await get_current_admin(identity) is identity

    @pytest.mark.asyncio
    async def test_non_admin_is_forbidden(self):
        identity = CallerIdentity(email="a@unify.dev", groups=["students"])

        with pytest.raises(HTTPException) as exc_info:
            await get_current_admin(identity)

        assert exc_info.value.status_code == 403


class TestErrorBodies:
    """Every error response is a flat {error, details?} object."""

    @pytest.mark.asyncio
    async def test_missing_authorization_header(self, client):
        response = await client.get("/student/dashboard")

        assert response.status_code == 401
        assert response.json() == {"error": "No authorization header"}

    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        response = await client.get("/nowhere")

        assert response.status_code == 404
        assert response.json() == {"error": "Endpoint not found"}

    @pytest.mark.asyncio
    async def test_invalid_body_is_bad_request(self, client, auth_headers):
        response = await client.post(
            "/register-student",
            json={"chapterName": "Robotics"},
            headers=auth_headers("alice@unify.dev"),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"
        assert response.json()["details"]

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
