"""
api/main.py -- FastAPI application entry point for the bookstore API.

Run with:      python main.py
               uvicorn api.main:app --reload

Middleware stack:
  CORSMiddleware     -- adds CORS headers for allowed browser origins
  SlowAPIMiddleware  -- enforces per-route rate limits from api.limiter
  log_requests       -- one log line per request with status and latency

Lifespan builds the database engine and both stores on startup and disposes
the engine on shutdown.

Settings are loaded at import time. A missing or short JWT_SECRET makes the
import fail, which is the intended fatal startup error.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.books import router as books_router
from auth.dependencies import Unauthorized
from auth.store import UserStore
from books.store import BookStore
from core.config import get_settings
from core.db import create_db_engine, ping
from core.errors import StoreError

__version__ = "1.0.0"

settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("bookstore.api")


# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage the database engine and stores across the server lifetime.

    Both stores share one engine, so the books and users tables live in the
    same database file. Each store creates its table if it is missing.
    """
    logger.info("Bookstore API starting up")
    app.state.engine = create_db_engine(settings.database_url)
    app.state.book_store = BookStore(app.state.engine)
    app.state.user_store = UserStore(app.state.engine)
    logger.info("Database initialized")

    yield

    app.state.engine.dispose()
    logger.info("Bookstore API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Bookstore API",
    description="Book catalogue CRUD with email/password registration and cookie sessions.",
    version=__version__,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Bookstore", "description": "Bookstore endpoints"},
        {"name": "Auth", "description": "Authentication endpoints"},
    ],
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Every request passes through this coroutine before reaching any route
# handler. We capture wall-clock time before and after call_next so we can
# report latency on every response.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(books_router, tags=["Bookstore"])
app.include_router(auth_router, tags=["Auth"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All JSON errors share the ErrorResponse envelope so API clients can parse
# them uniformly. The session guard is the one exception: it answers with the
# plain-text body "Unauthorized".
# ---------------------------------------------------------------------------


@app.exception_handler(Unauthorized)
async def unauthorized_handler(request: Request, exc: Unauthorized) -> PlainTextResponse:
    return PlainTextResponse("Unauthorized", status_code=401)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Render a persistence failure. The store has already logged the traceback."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message)).model_dump(),
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Too many /login attempts from one address.

    Retry-After is the length of the limit's window, e.g. 60 for "10/minute".
    """
    logger.warning("Rate limit hit on %s from %s", request.url.path, get_remote_address(request))
    response = JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=ErrorDetail(code="rate_limited", message="Too many login attempts.", detail=str(exc.detail))
        ).model_dump(),
    )
    response.headers["Retry-After"] = str(exc.limit.limit.get_expiry())
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Covers both bodies (BookCreate, BookUpdate, Credentials) and path ids.
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(code="validation_error", message="Request validation failed.", detail=str(exc.errors()))
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap HTTPException in the error envelope.

    The book and register routes pass an ErrorDetail dict as detail, which is
    used as-is. Anything else (e.g. Starlette's 404 for an unknown path or a
    405) gets an http_<status> code.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=ErrorDetail(code=f"http_{exc.status_code}", message=str(exc.detail))).model_dump(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=ErrorDetail(code="internal_error", message="An unexpected error occurred.")).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable.
# No auth and no rate limit -- load balancers must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness, version, and whether the database answers."""
    engine = getattr(request.app.state, "engine", None)
    db_ok = engine is not None and ping(engine)
    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        version=__version__,
        components={"app": "ok", "database": "ok" if db_ok else "error"},
    )
