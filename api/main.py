"""
api/main.py -- FastAPI application entry point for Bookshelf.

Run with:  uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- adds CORS headers for allowed browser origins; credentials
                       are allowed because the session lives in cookies
  2. log_requests   -- one log line per request with status and latency

Lifespan handles startup (settings validation, stores, auth service) and
shutdown (dispose DB engines) symmetrically. Settings are first loaded inside
the lifespan, so a missing or weak token secret stops the server before it
accepts a single request.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models import ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.books import router as books_router
from auth.cookies import SessionCookies
from auth.errors import AuthError
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import ACCESS, REFRESH, Clock, TokenIssuer, utcnow
from books.store import BookStore
from core.config import Settings, get_settings

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("bookshelf.api")


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def wire_state(
    app: FastAPI,
    settings: Settings,
    user_store: UserStore,
    book_store: BookStore,
    clock: Clock = utcnow,
) -> None:
    """Build the auth components from settings and attach them to app.state.

    Shared by the real lifespan and the test suite so both run the same
    object graph. clock is injectable so tests can move token time.
    """
    access_tokens = TokenIssuer(settings.access_token_secret, settings.access_token_ttl_seconds, ACCESS, clock)
    refresh_tokens = TokenIssuer(settings.refresh_token_secret, settings.refresh_token_ttl_seconds, REFRESH, clock)
    cookies = SessionCookies(
        access_max_age=settings.access_cookie_max_age,
        refresh_max_age=settings.refresh_cookie_max_age,
        secure=settings.secure_cookies,
    )
    app.state.user_store = user_store
    app.state.book_store = book_store
    app.state.access_tokens = access_tokens
    app.state.auth_service = AuthService(
        store=user_store,
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        access_tokens=access_tokens,
        refresh_tokens=refresh_tokens,
        cookies=cookies,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown.
    """
    settings = get_settings()  # raises on missing / weak secrets
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info("Bookshelf API starting up")

    user_store = UserStore(settings.database_url)
    book_store = BookStore(settings.database_url)
    wire_state(app, settings, user_store, book_store)
    logger.info("Auth initialized (bcrypt rounds=%d)", settings.bcrypt_rounds)

    yield

    user_store.close()
    book_store.close()
    logger.info("Bookshelf API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Bookshelf API",
    description="Book catalogue with cookie-based access and refresh token authentication.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost", "http://localhost:3000", "http://127.0.0.1"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Request logging middleware
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

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(books_router, prefix="/api/v1", tags=["Books"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope ({code, message}) so
# clients can parse errors uniformly.
# ---------------------------------------------------------------------------


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render the auth failure taxonomy. The message is fixed per class."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or path params fail validation.

    The submitted value ("input") is left out of the detail so a rejected
    field, a password included, is never echoed back.
    """
    errors = [{k: v for k, v in err.items() if k != "input"} for err in exc.errors()]
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            code="validation_error",
            message="Request validation failed.",
            detail=str(errors),
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with detail={"code": ..., "message": ...}.
    That dict is the response body as-is; anything else is wrapped.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content=exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(code=f"http_{exc.status_code}", message=str(exc.detail)).model_dump(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(code="internal_error", message="Internal Server Error").model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=__version__)
