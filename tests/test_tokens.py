"""Unit tests for auth/tokens.py -- hashing, session tokens, and the auth flow.

Covers:
- argon2id is the default hash and is salted per record
- bcrypt hashes are produced when configured and still verify afterwards
- verify_password() returns False for mismatches and corrupt hashes
- create_session_token()/decode_session_token() accept only valid, unexpired
  tokens signed with JWT_SECRET
- register_user()/authenticate_user() outcomes, including store failures
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from sqlalchemy import text

from auth.models import AuthFailure
from auth.store import UserStore
from auth.tokens import (
    authenticate_user,
    create_session_token,
    decode_session_token,
    hash_password,
    register_user,
    verify_password,
)
from core.config import get_settings
from core.db import create_db_engine


@pytest.fixture
def bcrypt_mode(monkeypatch):
    """Switch PASSWORD_ALGORITHM to bcrypt for one test."""
    monkeypatch.setenv("PASSWORD_ALGORITHM", "bcrypt")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def users():
    engine = create_db_engine("sqlite:///:memory:")
    yield UserStore(engine)
    engine.dispose()


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


class TestPasswordHashing:
    def test_default_is_argon2id(self):
        hashed = hash_password("hunter2")
        assert hashed.startswith("$argon2id$")
        assert "hunter2" not in hashed

    def test_same_password_different_salt(self):
        assert hash_password("hunter2") != hash_password("hunter2")

    def test_verify_roundtrip(self):
        hashed = hash_password("hunter2")
        assert verify_password("hunter2", hashed)
        assert not verify_password("hunter3", hashed)

    def test_bcrypt_when_configured(self, bcrypt_mode):
        hashed = hash_password("hunter2")
        assert hashed.startswith("$2")
        assert verify_password("hunter2", hashed)
        assert not verify_password("nope", hashed)

    def test_bcrypt_hash_verifies_after_switching_back(self, bcrypt_mode, monkeypatch):
        legacy = hash_password("hunter2")
        monkeypatch.setenv("PASSWORD_ALGORITHM", "argon2id")
        get_settings.cache_clear()
        assert hash_password("x").startswith("$argon2id$")
        assert verify_password("hunter2", legacy)

    def test_bcrypt_long_password(self, bcrypt_mode):
        long_pw = "p" * 100
        assert verify_password(long_pw, hash_password(long_pw))

    @pytest.mark.parametrize("corrupt", ["", "plaintext", "$argon2id$garbage", "$2b$garbage"])
    def test_corrupt_hash_is_false(self, corrupt):
        assert verify_password("anything", corrupt) is False


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------


class TestSessionTokens:
    def test_roundtrip(self):
        token = create_session_token("a@example.com")
        assert decode_session_token(token) == "a@example.com"

    def test_default_expiry_is_seven_days(self):
        token = create_session_token("a@example.com")
        claims = jwt.get_unverified_claims(token)
        lifetime = claims["exp"] - datetime.now(timezone.utc).timestamp()
        assert 7 * 86400 - 60 < lifetime <= 7 * 86400

    def test_expired_token(self):
        token = jwt.encode(
            {"sub": "a@example.com", "exp": datetime.now(timezone.utc) - timedelta(seconds=1)},
            get_settings().jwt_secret,
            algorithm="HS256",
        )
        assert decode_session_token(token) is None

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "a@example.com"}, "x" * 40, algorithm="HS256")
        assert decode_session_token(token) is None

    def test_malformed(self):
        assert decode_session_token("garbage") is None
        assert decode_session_token("a.b.c") is None

    def test_missing_subject(self):
        token = jwt.encode(
            {"exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            get_settings().jwt_secret,
            algorithm="HS256",
        )
        assert decode_session_token(token) is None


# ---------------------------------------------------------------------------
# Register / authenticate
# ---------------------------------------------------------------------------


class TestAuthenticateUser:
    def test_register_stores_hash_not_plaintext(self, users):
        register_user(users, "a@example.com", "hunter2")
        stored = users.get_by_email("a@example.com")
        assert stored is not None
        assert stored.hashed_password != "hunter2"
        assert verify_password("hunter2", stored.hashed_password)

    def test_success(self, users):
        register_user(users, "a@example.com", "hunter2")
        result = authenticate_user(users, "a@example.com", "hunter2")
        assert result.success
        assert result.user.email == "a@example.com"
        assert result.reason is None

    def test_wrong_password(self, users):
        register_user(users, "a@example.com", "hunter2")
        result = authenticate_user(users, "a@example.com", "wrong")
        assert not result.success
        assert result.reason is AuthFailure.invalid_password
        assert result.message == "Invalid password"

    def test_unknown_email(self, users):
        result = authenticate_user(users, "ghost@example.com", "hunter2")
        assert not result.success
        assert result.reason is AuthFailure.not_found
        assert result.message == "User not found"

    def test_email_match_is_exact(self, users):
        register_user(users, "a@example.com", "hunter2")
        result = authenticate_user(users, "A@example.com", "hunter2")
        assert result.reason is AuthFailure.not_found

    def test_store_failure_is_internal_error(self, users):
        with users.engine.connect() as conn:
            conn.execute(text("DROP TABLE users"))
            conn.commit()
        result = authenticate_user(users, "a@example.com", "hunter2")
        assert not result.success
        assert result.reason is AuthFailure.internal_error
        assert result.message == "Failed to retrieve user."
