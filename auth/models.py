"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in books/models.py -- dataclasses own domain shape; stores and routes do the
work.

Layer rule: no imports from api/ or books/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass
class User:
    """A registered account.

    email is the primary key, so it is both the identity and the login name.
    hashed_password always holds an argon2 or bcrypt hash, never plaintext.
    """

    email: str
    hashed_password: str


class AuthFailure(str, Enum):
    not_found = "user_not_found"
    invalid_password = "invalid_password"
    internal_error = "internal_error"


@dataclass
class AuthResult:
    """Outcome of authenticate_user().

    success=True carries the User; success=False carries a reason and a
    human-readable message for the login response.
    """

    success: bool
    user: User | None = None
    reason: AuthFailure | None = None
    message: str = ""
