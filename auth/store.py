"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as books/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  The store only ever receives already-hashed passwords. Hashing lives in
  auth/tokens.py (register_user) so this module has no crypto dependency.

Uniqueness:
  email is the PRIMARY KEY. A second registration with the same email hits
  the constraint and is reported as DuplicateEmail rather than relying on
  the caller to check first (which would race).

Layer rule: no imports from api/ or books/.
"""

from __future__ import annotations

import logging

from sqlalchemy import Column, String, Table, Text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.models import User
from core.db import metadata
from core.errors import DuplicateEmail, InsertFailed, QueryFailed

logger = logging.getLogger("bookstore.auth")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_users = Table(
    "users",
    metadata,
    Column("email", String(255), primary_key=True),
    Column("password", Text, nullable=False),  # argon2 / bcrypt hash
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore(engine)
        store.create_user(User(email="a@example.com", hashed_password=hash_password("secret")))
        user = store.get_by_email("a@example.com")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        _users.create(self.engine, checkfirst=True)

    def create_user(self, user: User) -> None:
        """Insert a new user.

        Raises DuplicateEmail if the email is already registered and
        InsertFailed for any other database error.
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(_users.insert().values(email=user.email, password=user.hashed_password))
                conn.commit()
        except IntegrityError as exc:
            logger.info("Registration rejected: email already exists")
            raise DuplicateEmail("A user with that email already exists.") from exc
        except SQLAlchemyError as exc:
            logger.exception("create_user failed")
            raise InsertFailed("Failed to create user.") from exc

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        except SQLAlchemyError as exc:
            logger.exception("get_by_email failed")
            raise QueryFailed("Failed to retrieve user.") from exc
        return _row_to_user(row) if row is not None else None


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(email=row.email, hashed_password=row.password)
