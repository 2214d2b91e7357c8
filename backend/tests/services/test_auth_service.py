"""Tests for registration, login and token validation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from micromiro_backend.app.core.config import AuthSettings
from micromiro_backend.app.core.errors import AuthError, ConflictError, ValidationError
from micromiro_backend.app.services.auth import AuthService
from micromiro_backend.app.services.schema import DEFAULT_ROLE_ID

TEST_JWT_SECRET = "test-secret"


@pytest.fixture
def registered(auth_service: AuthService) -> int:
    return auth_service.register("alice", "alice@example.com", "s3cret")


class TestRegister:
    def test_stores_hash_not_plaintext(self, auth_service, users_repo, registered):
        user = users_repo.get_user(registered)

        assert user.username == "alice"
        assert user.email == "alice@example.com"
        assert user.role_id == DEFAULT_ROLE_ID
        assert user.password_hash != "s3cret"
        assert auth_service.verify_password("s3cret", user.password_hash)

    def test_duplicate_email(self, auth_service, registered):
        with pytest.raises(ConflictError):
            auth_service.register("alice2", "alice@example.com", "pw")

    def test_duplicate_username(self, auth_service, registered):
        with pytest.raises(ConflictError):
            auth_service.register("alice", "other@example.com", "pw")

    def test_repository_translates_constraint_violation(self, users_repo, registered):
        """A race past the existence check still surfaces as a conflict."""
        with pytest.raises(ConflictError):
            users_repo.create_user("alice", "alice@example.com", "hash")

    @pytest.mark.parametrize(
        "username,email,password",
        [("", "a@example.com", "pw"), ("a", " ", "pw"), ("a", "a@example.com", "")],
    )
    def test_missing_fields(self, auth_service, username, email, password):
        with pytest.raises(ValidationError):
            auth_service.register(username, email, password)


class TestLogin:
    def test_token_carries_identity(self, auth_service, registered):
        token = auth_service.login("alice@example.com", "s3cret")

        claims = jwt.decode(token, TEST_JWT_SECRET, algorithms=["HS256"])
        assert claims["user_id"] == registered
        assert claims["email"] == "alice@example.com"
        assert claims["role_id"] == DEFAULT_ROLE_ID
        assert isinstance(claims["exp"], int)

    def test_token_expires_after_ttl(self, auth_service, registered):
        issued_at = datetime.now(UTC).timestamp()
        token = auth_service.login("alice@example.com", "s3cret")

        claims = jwt.get_unverified_claims(token)
        assert abs(claims["exp"] - (issued_at + 24 * 3600)) <= 2

    def test_wrong_password_and_unknown_email_look_the_same(self, auth_service, registered):
        with pytest.raises(AuthError) as wrong_password:
            auth_service.login("alice@example.com", "nope")
        with pytest.raises(AuthError) as unknown_email:
            auth_service.login("nobody@example.com", "s3cret")

        assert wrong_password.value.message == unknown_email.value.message
        assert wrong_password.value.status_code == unknown_email.value.status_code


class TestAuthenticate:
    def test_round_trip(self, auth_service, registered):
        identity = auth_service.authenticate(auth_service.login("alice@example.com", "s3cret"))

        assert identity.user_id == registered
        assert identity.email == "alice@example.com"
        assert identity.role_id == DEFAULT_ROLE_ID

    def test_expired(self, auth_service, registered):
        token = auth_service.create_access_token(
            {"user_id": registered, "email": "alice@example.com", "role_id": 1},
            expires_delta=timedelta(seconds=-10),
        )

        with pytest.raises(AuthError):
            auth_service.authenticate(token)

    def test_wrong_signature(self, auth_service, users_repo, registered):
        forger = AuthService(users_repo, AuthSettings(jwt_secret="another-secret", bcrypt_rounds=4))
        token = forger.create_access_token(
            {"user_id": registered, "email": "alice@example.com", "role_id": 1}
        )

        with pytest.raises(AuthError):
            auth_service.authenticate(token)

    def test_malformed(self, auth_service):
        with pytest.raises(AuthError):
            auth_service.authenticate("not.a.token")

    def test_missing_claims(self, auth_service):
        token = auth_service.create_access_token({"email": "alice@example.com"})

        with pytest.raises(AuthError):
            auth_service.authenticate(token)
