"""
api/routes/auth.py -- Registration and session endpoints.

Routes:
  POST /register  -- create a user (public)
  POST /login     -- password login; sets the httpOnly session cookie (public)
  POST /logout    -- clears the session cookie (public)

Security:
  POST /login is rate-limited per client address (LOGIN_RATE_LIMIT).
  Cache-Control: no-store on login responses.
  Passwords are hashed in auth.tokens.register_user() before they reach the
  store; the plaintext never touches the database.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from api.deps import get_user_store
from api.limiter import limiter, login_rate_limit
from api.models import Credentials, ErrorDetail, ErrorResponse, MessageResponse
from auth.models import AuthFailure
from auth.store import UserStore
from auth.tokens import (
    authenticate_user,
    clear_auth_cookie,
    create_session_token,
    register_user,
    set_auth_cookie,
)
from core.errors import DuplicateEmail

router = APIRouter()


@router.post("/register", response_model=MessageResponse, status_code=201)
def register(body: Credentials, store: UserStore = Depends(get_user_store)) -> MessageResponse:
    """Create a user account.

    The email column is the primary key, so a second registration with the
    same address is rejected with 409 instead of silently overwriting.
    """
    try:
        register_user(store, body.email, body.password)
    except DuplicateEmail as exc:
        raise HTTPException(
            status_code=409,
            detail=ErrorDetail(code=exc.code, message=exc.message).model_dump(),
        ) from exc
    return MessageResponse(message="User Created!")


@router.post("/login", response_model=MessageResponse)
@limiter.limit(login_rate_limit)
def login(request: Request, body: Credentials, store: UserStore = Depends(get_user_store)) -> JSONResponse:
    """Authenticate with email and password; set the session cookie.

    Unknown email and wrong password are 400s with distinct codes
    (user_not_found / invalid_password). A database failure during lookup is
    a 500 internal_error.
    """
    result = authenticate_user(store, body.email, body.password)
    if not result.success:
        status = 500 if result.reason is AuthFailure.internal_error else 400
        resp = JSONResponse(
            status_code=status,
            content=ErrorResponse(error=ErrorDetail(code=result.reason.value, message=result.message)).model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(status_code=200, content=MessageResponse(message="Login Success").model_dump())
    set_auth_cookie(resp, create_session_token(result.user.email))
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/logout", response_model=MessageResponse)
def logout() -> JSONResponse:
    """Clear the session cookie. The token itself stays valid until it expires."""
    resp = JSONResponse(content=MessageResponse(message="Logged out.").model_dump())
    clear_auth_cookie(resp)
    return resp
