"""
auth/tokens.py -- Session tokens, password hashing, and the login/register flow.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with JWT_SECRET and carry the
       user's email as the subject plus an expiry. Verification returns None
       on any failure -- the guard turns that into a 401. Tokens are
       stateless: a valid signature does not prove the user still exists.

  Passwords: argon2id via argon2-cffi by default. It is memory-hard, salts
       every record with random bytes, and embeds its parameters in the
       encoded hash. bcrypt is kept as a selectable alternative
       (PASSWORD_ALGORITHM=bcrypt), and verify_password() recognises both
       formats by prefix, so switching the setting never locks out users
       whose hash was written under the other one.

  JWT_SECRET: sourced from core.config.get_settings(). Settings refuses to
       load without one, so there is no empty-key code path here.

Layer rule: no imports from api/ or books/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import JWTError, jwt

from auth.models import AuthFailure, AuthResult, User
from core.config import get_settings
from core.errors import StoreError

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("bookstore.auth")

_ALGORITHM = "HS256"

# bcrypt only looks at the first 72 bytes and bcrypt>=4.1 raises on longer
# input, so both hashing and checking truncate explicitly.
_BCRYPT_MAX_BYTES = 72

_argon2 = PasswordHasher()

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted hash of the plaintext password.

    The algorithm comes from Settings.password_algorithm. Both encodings are
    self-describing ("$argon2id$..." / "$2b$..."), which is what lets
    verify_password() pick the right checker later.
    """
    if get_settings().password_algorithm == "bcrypt":
        secret = plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(secret, bcrypt.gensalt()).decode("utf-8")
    return _argon2.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the stored hash.

    A mismatch, an unknown hash format, or a corrupt hash all return False.
    Both libraries compare in constant time.
    """
    if hashed.startswith("$argon2"):
        try:
            return _argon2.verify(hashed, plain)
        except (VerificationError, InvalidHashError):
            return False
    if hashed.startswith("$2"):
        try:
            return bcrypt.checkpw(plain.encode("utf-8")[:_BCRYPT_MAX_BYTES], hashed.encode("utf-8"))
        except ValueError:
            return False
    logger.warning("Stored password hash has an unrecognised format")
    return False


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_session_token(email: str, expire_seconds: int = 0) -> str:
    """Encode a signed JWT identifying the user by email.

    Args:
        email:          Stored as the "sub" claim.
        expire_seconds: Token lifetime. If 0 (default), uses
                        Settings.session_max_age (7 days).
    """
    settings = get_settings()
    duration = expire_seconds if expire_seconds > 0 else settings.session_max_age
    payload = {
        "sub": email,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=duration),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=_ALGORITHM)


def decode_session_token(token: str) -> str | None:
    """Verify a JWT and return the email it was issued for, or None.

    Returning None (rather than raising) keeps the guard simple: a bad
    signature, a malformed string, or an expired token are all just
    "unauthenticated".
    """
    try:
        payload = jwt.decode(token, get_settings().jwt_secret, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    email = payload.get("sub")
    if not isinstance(email, str) or not email:
        return None
    return email


# ---------------------------------------------------------------------------
# Registration and login
# ---------------------------------------------------------------------------


def register_user(store: UserStore, email: str, password: str) -> None:
    """Hash the password and persist a new user.

    Propagates DuplicateEmail / InsertFailed from the store unchanged.
    """
    store.create_user(User(email=email, hashed_password=hash_password(password)))
    logger.info("User registered")


def authenticate_user(store: UserStore, email: str, password: str) -> AuthResult:
    """Check an email/password pair against the user store.

    Never raises: database failures are reported as
    AuthResult(success=False, reason=AuthFailure.internal_error).
    """
    try:
        user = store.get_by_email(email)
    except StoreError as exc:
        return AuthResult(success=False, reason=AuthFailure.internal_error, message=exc.message)
    if user is None:
        return AuthResult(success=False, reason=AuthFailure.not_found, message="User not found")
    if not verify_password(password, user.hashed_password):
        return AuthResult(success=False, reason=AuthFailure.invalid_password, message="Invalid password")
    return AuthResult(success=True, user=user)


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_auth_cookie(response, token: str) -> None:
    """Write the session token as an httpOnly cookie on the response.

    httponly=True: JS cannot read the cookie (XSS mitigation).
    samesite="lax": cookie is not sent on cross-site POST -- CSRF mitigation
        for most cases.
    secure: only sent over HTTPS when SECURE_COOKIES=true.
    max_age: matches the JWT expiry so both expire together.
    """
    settings = get_settings()
    response.set_cookie(
        settings.cookie_name,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
        max_age=settings.session_max_age,
    )


def clear_auth_cookie(response) -> None:
    settings = get_settings()
    response.delete_cookie(settings.cookie_name, httponly=True, samesite="lax", secure=settings.secure_cookies)
