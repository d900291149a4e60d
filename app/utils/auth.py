"""
Password hashing and JWT helpers.
"""

import time
from typing import Any, Dict, Optional

import bcrypt
import jwt

from app.config import settings

REQUIRED_CLAIMS = ["sub", "iat", "exp"]


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8")
        )
    except ValueError:
        # Malformed digest, or a password bcrypt refuses (over 72 bytes)
        return False


def create_access_token(
    subject: str,
    extra_claims: Optional[Dict[str, Any]] = None,
    issued_at: Optional[int] = None,
    expires_minutes: Optional[int] = None
) -> str:
    """
    Sign a session token.

    Args:
        subject: user id stored in the ``sub`` claim
        extra_claims: additional public claims (name, email)
        issued_at: epoch seconds, defaults to now
        expires_minutes: lifetime, defaults to JWT_EXPIRE_MINUTES

    Returns:
        Encoded JWT
    """
    iat = int(time.time()) if issued_at is None else int(issued_at)
    lifetime = settings.JWT_EXPIRE_MINUTES if expires_minutes is None else expires_minutes

    payload: Dict[str, Any] = dict(extra_claims or {})
    payload.update({
        "sub": subject,
        "iat": iat,
        "exp": iat + lifetime * 60,
    })
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify the signature and required claims of a token.

    Expiry is checked by the caller against its own clock so the boundary
    can be pinned; ``jwt.InvalidTokenError`` is raised for everything else.
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": REQUIRED_CLAIMS, "verify_exp": False, "verify_iat": False}
    )
