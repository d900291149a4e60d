"""
Authentication routes for registration, login and the token's user view.
"""

from fastapi import APIRouter, Depends, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings
from app.dependencies import AuthServiceDep
from app.middleware.auth_middleware import get_current_user
from app.models.user import (
    LoginResponse,
    RegisterResponse,
    TokenData,
    UserCreate,
    UserLogin,
    UserPublic,
)

router = APIRouter(prefix="/api/auth", tags=["authentication"])

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(f"{settings.RATE_LIMIT_PER_MINUTE}/minute")
async def register(request: Request, user: UserCreate, auth_service: AuthServiceDep):
    """
    Register a new user account.

    No token is issued; the client logs in separately.

    Raises:
        ValidationError: missing fields
        ConflictError: email already registered
    """
    created = await auth_service.register(user.name, user.email, user.password)
    return {"message": "User registered successfully", "user": created}


@router.post("/login", response_model=LoginResponse)
@limiter.limit(f"{settings.RATE_LIMIT_PER_MINUTE}/minute")
async def login(request: Request, user: UserLogin, auth_service: AuthServiceDep):
    """
    Authenticate user and return a session token with the public user view.

    Raises:
        AuthError: unknown email or wrong password (same message for both)
    """
    token, public_user = await auth_service.login(user.email, user.password)
    return {"message": "Login successful", "token": token, "user": public_user}


@router.get("/me", response_model=UserPublic)
async def get_current_user_info(current_user: TokenData = Depends(get_current_user)):
    """User view built from the token claims; no store lookup."""
    return {
        "id": current_user.user_id,
        "name": current_user.name or "User",
        "email": current_user.email or ""
    }
