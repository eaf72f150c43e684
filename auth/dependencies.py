"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Two ways to ask "who is calling?":

  require_access_token() -- the request guard. Reads the accessToken cookie,
      verifies the signature and expiry, records the subject on
      request.state.user_id and returns it. No database lookup: the signed
      subject claim is trusted for authorization. Fast path for protected
      resource routes.

  get_current_user() -- full identity lookup via AuthService.authenticate().
      Re-reads the user from the store, so a deleted account is rejected even
      with a live token. Used by GET /auth/user.

Both raise UnauthorizedError; api/main.py renders it as 401.

auth/dependencies.py may import from fastapi (for Request) because this
module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.cookies import ACCESS_COOKIE
from auth.errors import UnauthorizedError
from auth.models import User
from auth.service import AuthService
from auth.tokens import TokenError, TokenIssuer


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def require_access_token(request: Request) -> str:
    """Guard a route. Returns the verified subject (user id).

    Use as a FastAPI dependency:
        @router.post("/protected")
        def route(user_id: str = Depends(require_access_token)): ...

    or router-wide via APIRouter(dependencies=[Depends(require_access_token)]).
    """
    token = request.cookies.get(ACCESS_COOKIE)
    if not token:
        # Nothing to verify -- reject without touching the token issuer.
        raise UnauthorizedError()

    access_tokens: TokenIssuer = request.app.state.access_tokens
    try:
        user_id = access_tokens.verify(token)
    except TokenError as exc:
        raise UnauthorizedError() from exc

    request.state.user_id = user_id
    return user_id


def get_current_user(request: Request) -> User:
    """Require a valid access cookie whose subject still exists in the store."""
    return get_auth_service(request).authenticate(request.cookies.get(ACCESS_COOKIE))
