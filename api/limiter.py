"""
api/limiter.py -- slowapi limiter for the login endpoint.

api/main.py mounts it (app.state.limiter + SlowAPIMiddleware) and
api/routes/auth.py decorates POST /login with it. Counters live in process
memory and are keyed by client address.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


def login_rate_limit() -> str:
    """LOGIN_RATE_LIMIT, looked up on each request rather than at import."""
    return get_settings().login_rate_limit
