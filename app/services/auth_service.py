"""
Registration, login and session-token validation.

Tokens are self-contained: nothing is stored server-side, so any process
holding JWT_SECRET_KEY can validate them and expiry is the only way a token
stops working.
"""

import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Tuple

import jwt
from loguru import logger

from app.exceptions import AuthError, ConflictError, ValidationError
from app.models.user import TokenData, UserPublic
from app.services.store import Store
from app.utils.auth import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)

INVALID_CREDENTIALS = "Invalid credentials"
MAX_PASSWORD_BYTES = 72  # bcrypt input limit


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """Stand-in digest so an unknown email still costs one bcrypt check."""
    return get_password_hash("tasklist-dummy-password")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def to_public_user(user: Dict[str, Any]) -> UserPublic:
    return UserPublic(id=str(user["_id"]), name=user["name"], email=user["email"])


class AuthService:

    def __init__(
        self,
        store: Store,
        expire_minutes: int,
        clock: Callable[[], float] = time.time
    ):
        self.store = store
        self.expire_minutes = expire_minutes
        self.clock = clock

    async def register(self, name: str, email: str, password: str) -> UserPublic:
        if not all(isinstance(v, str) and v.strip() for v in (name, email, password)):
            raise ValidationError("Please provide all required fields")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        email = normalize_email(email)
        if await self.store.get_user_by_email(email):
            logger.info(f"Registration rejected, email already exists: {email}")
            raise ConflictError("User with this email already exists", field="email")

        user = await self.store.create_user({
            "name": name.strip(),
            "email": email,
            "hashed_password": get_password_hash(password),
            "created_at": datetime.now(timezone.utc)
        })

        logger.info(f"New user registered: {email}")
        return to_public_user(user)

    async def login(self, email: str, password: str) -> Tuple[str, UserPublic]:
        if not (isinstance(email, str) and email.strip() and isinstance(password, str) and password):
            raise ValidationError("Please provide email and password")

        email = normalize_email(email)
        user = await self.store.get_user_by_email(email)

        # Unknown email and wrong password must be indistinguishable, in timing too
        digest = user["hashed_password"] if user else dummy_password_hash()
        if not verify_password(password, digest) or not user:
            logger.warning(f"Failed login attempt for {email}")
            raise AuthError(INVALID_CREDENTIALS)

        token = self.issue_token(user)
        logger.info(f"User logged in: {email}")
        return token, to_public_user(user)

    def issue_token(self, user: Dict[str, Any], now: Optional[float] = None) -> str:
        issued_at = int(self.clock() if now is None else now)
        return create_access_token(
            subject=str(user["_id"]),
            extra_claims={"name": user["name"], "email": user["email"]},
            issued_at=issued_at,
            expires_minutes=self.expire_minutes
        )

    def validate(self, token: str, now: Optional[float] = None) -> TokenData:
        if not token:
            raise AuthError("Not authenticated")

        try:
            claims = decode_access_token(token)
        except jwt.InvalidTokenError as e:
            logger.warning(f"Token rejected: {e}")
            raise AuthError("Invalid token") from e

        current = self.clock() if now is None else now
        try:
            expires_at = int(claims["exp"])
            issued_at = int(claims["iat"])
        except (TypeError, ValueError) as e:
            raise AuthError("Invalid token") from e

        if current >= expires_at:
            logger.warning(f"Expired token presented for subject {claims.get('sub')}")
            raise AuthError("Token has expired")

        return TokenData(
            user_id=str(claims["sub"]),
            email=claims.get("email"),
            name=claims.get("name"),
            issued_at=issued_at,
            expires_at=expires_at
        )
