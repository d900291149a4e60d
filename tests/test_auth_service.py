# =============================================================================
# tests/test_auth_service.py - Auth Service Tests
# =============================================================================
# Registration, login and token validation against the memory store.
# =============================================================================

import jwt
import pytest

from app.config import settings
from app.exceptions import AuthError, ConflictError, ValidationError
from app.services.auth_service import INVALID_CREDENTIALS, dummy_password_hash
from app.utils.auth import create_access_token, verify_password

PASSWORD = "s3cret-pass"
T0 = 1_700_000_000
HOUR = 3600


async def _register(auth_service, email="grace@example.com", name="Grace"):
    return await auth_service.register(name, email, PASSWORD)


class TestRegister:

    async def test_returns_public_user(self, auth_service):
        user = await _register(auth_service)

        assert user.name == "Grace"
        assert user.email == "grace@example.com"
        assert user.id
        assert "hashed_password" not in user.model_dump()

    async def test_stores_salted_digest(self, auth_service, store):
        await _register(auth_service)
        stored = await store.get_user_by_email("grace@example.com")

        assert stored["hashed_password"] != PASSWORD
        assert verify_password(PASSWORD, stored["hashed_password"])

    @pytest.mark.parametrize("name,email,password", [
        ("", "a@example.com", "pw"),
        ("A", "", "pw"),
        ("A", "a@example.com", ""),
        ("   ", "a@example.com", "pw"),
        (None, "a@example.com", "pw"),
    ])
    async def test_missing_fields(self, auth_service, store, name, email, password):
        with pytest.raises(ValidationError):
            await auth_service.register(name, email, password)

        assert (await store.ping())["users"] == 0

    async def test_duplicate_email_conflicts(self, auth_service, store):
        first = await _register(auth_service)
        before = await store.get_user_by_email("grace@example.com")

        with pytest.raises(ConflictError):
            await auth_service.register("Impostor", "grace@example.com", "other-password")

        after = await store.get_user_by_email("grace@example.com")
        assert after == before
        assert after["_id"] == first.id
        assert (await store.ping())["users"] == 1

    async def test_duplicate_check_ignores_case(self, auth_service):
        await _register(auth_service)

        with pytest.raises(ConflictError):
            await auth_service.register("Grace", "  GRACE@Example.com ", PASSWORD)


class TestLogin:

    async def test_success_returns_token_and_user(self, auth_service):
        registered = await _register(auth_service)

        token, user = await auth_service.login("grace@example.com", PASSWORD)

        assert user == registered
        claims = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=["HS256"])
        assert claims["sub"] == registered.id
        assert claims["name"] == "Grace"
        assert claims["email"] == "grace@example.com"
        assert claims["exp"] - claims["iat"] == 24 * HOUR

    async def test_wrong_password_and_unknown_email_are_indistinguishable(self, auth_service):
        await _register(auth_service)

        with pytest.raises(AuthError) as wrong_password:
            await auth_service.login("grace@example.com", "not-the-password")
        with pytest.raises(AuthError) as unknown_email:
            await auth_service.login("nobody@example.com", PASSWORD)

        assert wrong_password.value.message == INVALID_CREDENTIALS
        assert unknown_email.value.message == wrong_password.value.message

    async def test_unknown_email_still_checks_a_digest(self, auth_service, monkeypatch):
        checked = []

        def spy(password, digest):
            checked.append(digest)
            return verify_password(password, digest)

        monkeypatch.setattr("app.services.auth_service.verify_password", spy)

        with pytest.raises(AuthError):
            await auth_service.login("nobody@example.com", PASSWORD)

        assert checked == [dummy_password_hash()]

    async def test_missing_fields(self, auth_service):
        with pytest.raises(ValidationError):
            await auth_service.login("", PASSWORD)


class TestValidate:

    async def test_expiry_boundary(self, auth_service):
        user = await _register(auth_service)
        stored = await auth_service.store.get_user_by_email(user.email)
        token = auth_service.issue_token(stored, now=T0)

        claims = auth_service.validate(token, now=T0 + 23 * HOUR + 59 * 60)
        assert claims.user_id == user.id
        assert claims.issued_at == T0
        assert claims.expires_at == T0 + 24 * HOUR

        with pytest.raises(AuthError):
            auth_service.validate(token, now=T0 + 24 * HOUR)
        with pytest.raises(AuthError):
            auth_service.validate(token, now=T0 + 24 * HOUR + 60)

    def test_uses_injected_clock(self, store):
        from app.services.auth_service import AuthService

        now = [T0]
        service = AuthService(store, expire_minutes=60, clock=lambda: now[0])
        token = service.issue_token({"_id": "abc", "name": "N", "email": "n@example.com"})

        assert service.validate(token).user_id == "abc"
        now[0] = T0 + HOUR
        with pytest.raises(AuthError):
            service.validate(token)

    @pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c"])
    def test_malformed(self, auth_service, token):
        with pytest.raises(AuthError):
            auth_service.validate(token, now=T0)

    def test_bad_signature(self, auth_service):
        forged = jwt.encode(
            {"sub": "abc", "iat": T0, "exp": T0 + HOUR},
            "some-other-secret",
            algorithm="HS256"
        )
        with pytest.raises(AuthError):
            auth_service.validate(forged, now=T0)

    def test_tampered_payload(self, auth_service):
        token = create_access_token("abc", issued_at=T0)
        header, payload, signature = token.split(".")
        other = create_access_token("xyz", issued_at=T0).split(".")[1]

        with pytest.raises(AuthError):
            auth_service.validate(".".join([header, other, signature]), now=T0)

    def test_missing_expiry_claim(self, auth_service):
        token = jwt.encode({"sub": "abc", "iat": T0}, settings.JWT_SECRET_KEY, algorithm="HS256")

        with pytest.raises(AuthError):
            auth_service.validate(token, now=T0)
