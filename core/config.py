"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the bookstore API happen here. No module
should call os.getenv() or os.environ.get() directly -- import get_settings()
instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. jwt_secret -> JWT_SECRET). Type coercion and validation are built in.

Security notes:
  A missing JWT_SECRET is a hard startup failure in every mode. An empty
  signing key would let anyone mint a valid session cookie.

  JWT_SECRET shorter than 32 chars is rejected outright. HS256 signing relies
  on key entropy -- a short key weakens every token.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or books/.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("bookstore.config")

_MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Every field except jwt_secret has a usable default. The model_validator
    refuses to build a Settings object without a signing key, so importing
    the app without JWT_SECRET fails at startup rather than on first login.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    log_level: str = "INFO"
    database_url: str = "sqlite:///mydb.sqlite"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured"; the validator raises.
    jwt_secret: str = ""
    cookie_name: str = "auth"
    secure_cookies: bool = False
    # 7 days, shared by the JWT exp claim and the cookie max_age.
    session_max_age: int = 7 * 86400
    password_algorithm: Literal["argon2id", "bcrypt"] = "argon2id"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    cors_origins: list[str] = ["http://localhost:3000"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_jwt_secret(self) -> "Settings":
        """Refuse to start without a strong JWT_SECRET.

        There is no dev-mode fallback: tests and local runs set JWT_SECRET
        explicitly (see tests/conftest.py and .env.example).
        """
        if not self.jwt_secret:
            raise ValueError(
                "JWT_SECRET is required. " "Set JWT_SECRET in your environment or .env file."
            )
        if len(self.jwt_secret) < _MIN_SECRET_LENGTH:
            raise ValueError(f"JWT_SECRET must be at least {_MIN_SECRET_LENGTH} characters.")
        if self.session_max_age <= 0:
            raise ValueError("SESSION_MAX_AGE must be a positive number of seconds.")
        if not self.secure_cookies:
            logger.warning("SECURE_COOKIES is off; the session cookie will also be sent over plain HTTP.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.
    All modules should call get_settings() rather than constructing Settings()
    directly.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
