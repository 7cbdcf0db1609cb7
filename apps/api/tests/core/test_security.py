"""
Tests for bearer token decoding and identity extraction.
"""

from unittest.mock import patch

from jose import jwt

from app.core.config import settings
from app.core.security import (
    CallerIdentity,
    decode_token,
    extract_identity,
    identity_from_token,
)


class TestDecodeToken:
    """Tests for decode_token."""

    def test_returns_claims_without_verification_by_default(self):
        token = jwt.encode({"email": "a@unify.dev"}, "any-secret", algorithm="HS256")

        assert decode_token(token) == {"email": "a@unify.dev"}

    def test_malformed_token_returns_none(self):
        assert decode_token("not-a-jwt") is None

    def test_verifies_signature_when_enabled(self):
        token = jwt.encode({"email": "a@unify.dev"}, "right-secret", algorithm="HS256")

        with (
            patch.object(settings, "jwt_verify_signature", True),
            patch.object(settings, "jwt_secret_key", "right-secret"),
        ):
            assert decode_token(token) == {"email": "a@unify.dev"}

    def test_wrong_signature_is_rejected_when_verifying(self):
        token = jwt.encode({"email": "a@unify.dev"}, "wrong-secret", algorithm="HS256")

        with (
            patch.object(settings, "jwt_verify_signature", True),
            patch.object(settings, "jwt_secret_key", "right-secret"),
        ):
            assert decode_token(token) is None

    def test_verification_without_secret_rejects(self):
        token = jwt.encode({"email": "a@unify.dev"}, "secret", algorithm="HS256")

        with (
            patch.object(settings, "jwt_verify_signature", True),
            patch.object(settings, "jwt_secret_key", None),
        ):
            assert decode_token(token) is None


class TestExtractIdentity:
    """Tests for extract_identity."""

    def test_email_claim(self):
        identity = extract_identity({"email": "a@unify.dev"})

        assert identity == CallerIdentity(email="a@unify.dev", claims={"email": "a@unify.dev"})

    def test_falls_back_to_username_claims(self):
        identity = extract_identity({"cognito:username": "b@unify.dev"})

        assert identity is not None
        assert identity.email == "b@unify.dev"

    def test_no_email_claim_returns_none(self):
        assert extract_identity({"sub": "123"}) is None

    def test_empty_claims_return_none(self):
        assert extract_identity(None) is None
        assert extract_identity({}) is None

    def test_groups_from_list_claim(self):
        identity = extract_identity({"email": "a@unify.dev", "cognito:groups": ["admin", "x"]})

        assert identity.groups == ["admin", "x"]
        assert identity.is_admin is True

    def test_groups_from_string_claim(self):
        identity = extract_identity({"email": "a@unify.dev", "groups": "students"})

        assert identity.groups == ["students"]
        assert identity.is_admin is False


def test_identity_from_token_round_trip():
    token = jwt.encode(
        {"email": "head@unify.dev", "cognito:groups": ["Admins"]}, "s", algorithm="HS256"
    )

    identity = identity_from_token(token)

    assert identity.email == "head@unify.dev"
    assert identity.is_admin is True
