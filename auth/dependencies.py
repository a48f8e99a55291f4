"""
auth/dependencies.py -- FastAPI Depends() helpers for the session guard.

The session is carried only in the httpOnly cookie set by POST /login
(name from Settings.cookie_name, "auth" by default).

try_get_session_email() is the soft variant (returns None on failure).
require_session() wraps it and raises Unauthorized, which api/main.py turns
into a 401 with the plain-text body "Unauthorized".

Layer rule: no imports from api/ or books/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.tokens import decode_session_token
from core.config import get_settings


class Unauthorized(Exception):
    """Raised by require_session() when the request carries no valid session."""


def try_get_session_email(request: Request) -> str | None:
    """Return the email from a valid session cookie, or None.

    Never raises -- callers that need a hard 401 should use require_session().
    """
    token = request.cookies.get(get_settings().cookie_name)
    if not token:
        return None
    return decode_session_token(token)


def require_session(request: Request) -> str:
    """Require a valid session cookie. Raises Unauthorized otherwise.

    Use as a FastAPI dependency:
        router = APIRouter(dependencies=[Depends(require_session)])
    """
    email = try_get_session_email(request)
    if email is None:
        raise Unauthorized()
    return email
