"""
Security Utilities

Bearer credential decoding and identity claim extraction.

Tokens are issued by an external identity provider. By default this
service only decodes the claims; signature verification is assumed to
happen upstream (API gateway authorizer). Set JWT_VERIFY_SIGNATURE=true
with JWT_SECRET_KEY to verify here as well.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from jose import JWTError, jwt

from app.core.config import settings

logger = logging.getLogger(__name__)

# Claim names, in lookup order
EMAIL_CLAIMS = ("email", "cognito:username", "username")
GROUP_CLAIMS = ("cognito:groups", "groups")


@dataclass
class CallerIdentity:
    """
    The identity behind a bearer credential.

    Attributes:
        email: Email claim of the caller
        groups: Group memberships carried by the token
        claims: The full decoded claim set
    """

    email: str
    groups: list[str] = field(default_factory=list)
    claims: dict[str, Any] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return any(group in settings.admin_groups_list for group in self.groups)

    def __str__(self) -> str:
        return f"CallerIdentity(email={self.email}, groups={self.groups})"


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decode a JWT and return its payload.

    Args:
        token: Raw JWT string (without the "Bearer " prefix)

    Returns:
        Claim dict, or None if the token is malformed or fails verification
    """
    try:
        if not settings.jwt_verify_signature:
            return jwt.get_unverified_claims(token)

        if not settings.jwt_secret_key:
            logger.error("JWT_VERIFY_SIGNATURE is enabled but JWT_SECRET_KEY is not set")
            return None

        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options={"verify_aud": settings.jwt_audience is not None},
        )
    except JWTError as e:
        logger.warning(f"Error decoding token: {e}")
        return None


def _extract_groups(claims: dict[str, Any]) -> list[str]:
    for claim in GROUP_CLAIMS:
        value = claims.get(claim)
        if isinstance(value, list):
            return [str(group) for group in value]
        if isinstance(value, str) and value:
            return [value]
    return []


def extract_identity(claims: dict[str, Any] | None) -> CallerIdentity | None:
    """
    Build a CallerIdentity from a decoded claim set.

    The email comes from the first present claim of EMAIL_CLAIMS.

    Returns:
        CallerIdentity, or None when no email-bearing claim is present
    """
    if not claims:
        return None

    email = next((claims[name] for name in EMAIL_CLAIMS if claims.get(name)), None)
    if not email or not isinstance(email, str):
        return None

    return CallerIdentity(email=email, groups=_extract_groups(claims), claims=claims)


def identity_from_token(token: str) -> CallerIdentity | None:
    """Decode a bearer token straight to a CallerIdentity."""
    return extract_identity(decode_token(token))


__all__ = [
    "CallerIdentity",
    "decode_token",
    "extract_identity",
    "identity_from_token",
]
