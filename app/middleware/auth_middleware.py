"""
Authentication middleware for protecting routes with JWT verification.
"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from app.dependencies import AuthServiceDep
from app.exceptions import AuthError
from app.models.user import TokenData

# auto_error=False so a missing header yields our 401 body rather than FastAPI's
security = HTTPBearer(auto_error=False)


async def get_current_user(
    auth_service: AuthServiceDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenData:
    """
    Dependency to get the current authenticated user from JWT token.

    Args:
        auth_service: service holding the signing secret
        credentials: HTTP Bearer token credentials, if any

    Returns:
        TokenData object containing user information

    Raises:
        AuthError: no bearer token, or the token failed validation
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("Not authenticated")

    return auth_service.validate(credentials.credentials)
