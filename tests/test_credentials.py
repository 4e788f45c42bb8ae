"""Tests for signup, login, and token authentication."""

import asyncio

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from jose import jwt

from spendwise.config import AuthSettings
from spendwise.services.auth import (
    CredentialService,
    EmailTakenError,
    InvalidCredentialsError,
    UnauthenticatedError,
    WeakPasswordError,
    extract_token,
)


@pytest.fixture
def credentials(storage, auth_settings):
    return CredentialService(storage, auth_settings)


def _register(credentials, email="alice@example.com", password="hunter22"):
    return asyncio.run(credentials.register("Alice", email, password))


class TestRegister:
    """Tests for signup."""

    def test_register_creates_user_with_zero_budget(self, credentials, storage):
        """Test a successful registration."""
        user = _register(credentials)

        stored = asyncio.run(storage.get_user_by_id(user.id))
        assert stored.email == "alice@example.com"
        assert stored.current_budget == Decimal("0")
        assert stored.spending == []

    def test_password_is_hashed(self, credentials):
        """Test that the plaintext password is never stored."""
        user = _register(credentials, password="hunter22")
        assert user.password_hash != "hunter22"
        assert user.password_hash.startswith("$2")
        assert credentials.verify_password("hunter22", user.password_hash)

    def test_duplicate_email_case_insensitive(self, credentials):
        """Test that the same address in another case is taken."""
        _register(credentials, email="alice@example.com")

        with pytest.raises(EmailTakenError):
            _register(credentials, email="ALICE@Example.com")

    def test_short_password_rejected(self, credentials):
        """Test the minimum password length."""
        with pytest.raises(WeakPasswordError):
            _register(credentials, password="12345")


class TestLogin:
    """Tests for login and token issuing."""

    def test_login_issues_token(self, credentials, storage, auth_settings):
        """Test that a token carrying the user ID is issued and remembered."""
        user = _register(credentials)

        token, logged_in = asyncio.run(credentials.login("Alice@Example.com", "hunter22"))

        assert logged_in.id == user.id
        claims = jwt.decode(token, auth_settings.secret, algorithms=["HS256"])
        assert claims["id"] == str(user.id)
        assert asyncio.run(storage.get_user_by_id(user.id)).active_token == token

    def test_token_expires_after_a_day(self, credentials):
        """Test the default token lifetime."""
        _register(credentials)
        token, _ = asyncio.run(credentials.login("alice@example.com", "hunter22"))

        claims = jwt.get_unverified_claims(token)
        expires = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
        remaining = expires - datetime.now(timezone.utc)
        assert timedelta(hours=23) < remaining <= timedelta(hours=24)

    def test_wrong_password(self, credentials):
        """Test that a bad password is refused."""
        _register(credentials)
        with pytest.raises(InvalidCredentialsError):
            asyncio.run(credentials.login("alice@example.com", "wrong-password"))

    def test_unknown_email(self, credentials):
        """Test that an unknown email gets the same error as a bad password."""
        with pytest.raises(InvalidCredentialsError):
            asyncio.run(credentials.login("nobody@example.com", "hunter22"))


class TestAuthenticate:
    """Tests for resolving tokens to users."""

    def test_valid_token(self, credentials):
        """Test that a fresh token resolves to its user."""
        user = _register(credentials)
        token, _ = asyncio.run(credentials.login("alice@example.com", "hunter22"))

        assert asyncio.run(credentials.authenticate(token)).id == user.id

    def test_missing_token(self, credentials):
        """Test that no token means unauthenticated."""
        with pytest.raises(UnauthenticatedError):
            asyncio.run(credentials.authenticate(None))

    def test_expired_token(self, storage, auth_settings):
        """Test that a token past its expiry is refused."""
        expired = CredentialService(
            storage,
            AuthSettings(secret=auth_settings.secret, bcrypt_rounds=4, expire_hours=-1),
        )
        _register(expired)
        token, _ = asyncio.run(expired.login("alice@example.com", "hunter22"))

        with pytest.raises(UnauthenticatedError):
            asyncio.run(expired.authenticate(token))

    def test_tampered_token(self, credentials):
        """Test that a token signed with another key is refused."""
        user = _register(credentials)
        forged = jwt.encode(
            {"id": str(user.id), "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "some-other-secret",
            algorithm="HS256",
        )

        with pytest.raises(UnauthenticatedError):
            asyncio.run(credentials.authenticate(forged))

    def test_garbage_token(self, credentials):
        """Test that a malformed token is refused."""
        with pytest.raises(UnauthenticatedError):
            asyncio.run(credentials.authenticate("not.a.token"))

    def test_token_for_missing_user(self, credentials):
        """Test that a well-signed token for an unknown user is refused."""
        token = credentials.issue_token(uuid4())
        with pytest.raises(UnauthenticatedError):
            asyncio.run(credentials.authenticate(token))


class TestExtractToken:
    """Tests for Authorization header parsing."""

    def test_bearer_and_raw(self):
        """Test both accepted header forms."""
        assert extract_token("Bearer abc.def.ghi") == "abc.def.ghi"
        assert extract_token("bearer abc.def.ghi") == "abc.def.ghi"
        assert extract_token("abc.def.ghi") == "abc.def.ghi"

    def test_empty(self):
        """Test that empty headers yield no token."""
        assert extract_token(None) is None
        assert extract_token("") is None
        assert extract_token("Bearer ") is None
