"""
Client-side session state.

Holds at most one token. The user view comes from the token's own claims,
decoded locally without a server round trip; the signature is only checked
by the server.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import jwt
from loguru import logger

from tasklist_client.storage import TokenStorage


@dataclass(frozen=True)
class SessionUser:
    id: str
    name: str
    email: str


def decode_claims(token: str) -> Dict[str, Any]:
    """Read a token's claims without verifying the signature."""
    return jwt.decode(token, options={"verify_signature": False})


class SessionManager:

    def __init__(self, storage: TokenStorage, clock: Callable[[], float] = time.time):
        self.storage = storage
        self.clock = clock
        self.token: Optional[str] = None
        self.user: Optional[SessionUser] = None
        self._load(storage.load())

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def _reset(self) -> None:
        self.token = None
        self.user = None

    def _load(self, token: Optional[str]) -> None:
        if not token:
            self._reset()
            return

        try:
            claims = decode_claims(token)
            expires_at = float(claims["exp"])
            subject = str(claims["sub"])
        except (jwt.InvalidTokenError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable session token: {e}")
            self.storage.clear()
            self._reset()
            return

        if expires_at <= self.clock():
            logger.info("Stored session token has expired")
            self.storage.clear()
            self._reset()
            return

        self.token = token
        self.user = SessionUser(
            id=subject,
            name=claims.get("name") or "User",
            email=claims.get("email") or ""
        )

    def set_token(self, token: str, user: Optional[Dict[str, Any]] = None) -> None:
        """
        Persist a freshly issued token and re-derive the session from it.

        ``user`` is the login response's user object; when given it wins
        over the claims for the in-memory view.
        """
        self.storage.save(token)
        self._load(token)
        if self.token and user:
            self.user = SessionUser(
                id=str(user.get("id", self.user.id)),
                name=user.get("name") or self.user.name,
                email=user.get("email") or self.user.email
            )

    def logout(self) -> None:
        self.storage.clear()
        self._reset()

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
