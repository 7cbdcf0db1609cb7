"""
Authentication and Authorization Module

Provides authentication dependencies for FastAPI endpoints.
This module turns the Authorization header into a CallerIdentity using the
decoding helpers in security.py, and gates admin-only endpoints on the
caller's group claims.

Chapter-head authorization needs a store lookup and lives in
app.modules.chapter_heads.service.
"""

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import settings
from app.core.security import CallerIdentity, identity_from_token

logger = logging.getLogger(__name__)

# auto_error is off so a missing header maps to our own 401 body
security = HTTPBearer(
    auto_error=False,
    description="JWT Bearer token issued by the identity provider",
)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> CallerIdentity:
    """
    FastAPI dependency that decodes the bearer token into a CallerIdentity.

    Args:
        credentials: HTTP Bearer token from Authorization header

    Returns:
        CallerIdentity of the caller

    Raises:
        HTTPException 401: If the header is missing or the token is undecodable
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "No authorization header"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity = identity_from_token(credentials.credentials)
    if identity is None:
        logger.warning("Rejected request with an undecodable bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Invalid token"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug(f"Authenticated caller: {identity.email}")
    return identity


async def get_current_admin(
    identity: CallerIdentity = Depends(get_current_identity),
) -> CallerIdentity:
    """
    FastAPI dependency that requires the caller to belong to an admin group.

    Raises:
        HTTPException 403: If the caller is not an admin
    """
    if not identity.is_admin:
        logger.warning(
            f"Access denied: {identity.email} has groups {identity.groups}, "
            f"but one of {settings.admin_groups_list} is required"
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "Access denied. Admin privileges required."},
        )

    return identity


__all__ = [
    "get_current_admin",
    "get_current_identity",
]
