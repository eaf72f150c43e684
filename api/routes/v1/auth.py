"""
api/routes/v1/auth.py -- Authentication REST endpoints.

Routes:
  POST     /api/v1/auth/register   -- create account; 201 + user (no hash)
  POST     /api/v1/auth/login      -- password login; sets accessToken + refreshToken cookies
  GET      /api/v1/auth/user       -- current user from the accessToken cookie
  POST     /api/v1/auth/refresh    -- new accessToken cookie from the refreshToken cookie
  GET|POST /api/v1/auth/logout     -- clears both cookies; 200

Handlers are thin: they unpack the request, call AuthService, and shape the
response. Every failure is an AuthError raised by the service and rendered by
the handler in api/main.py.

Security:
  [T1] Login failures for an unknown email and a wrong password produce the
       same status and body. AuthService owns this -- do NOT add a separate
       lookup here.
  [M5] Cache-Control: no-store on login and refresh responses.
  Token values never appear in a response body, only in Set-Cookie.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import LoginRequest, MessageResponse, RegisterRequest, UserResponse
from auth.cookies import REFRESH_COOKIE
from auth.dependencies import get_auth_service, get_current_user
from auth.models import User
from auth.service import AuthService

# Auth policy:
# - POST /auth/register, /auth/login: public
# - POST /auth/refresh:               public route, authorized by the refresh cookie
# - GET  /auth/user:                  requires a valid access cookie (get_current_user)
# - GET|POST /auth/logout:            public -- clearing cookies needs no prior auth
router = APIRouter()


@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(body: RegisterRequest, service: AuthService = Depends(get_auth_service)) -> UserResponse:
    """Register a new account. The stored password hash is never returned."""
    user = service.register(body.name, body.email, body.password)
    return UserResponse.from_user(user)


@router.post("/auth/login", response_model=MessageResponse)
def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)) -> JSONResponse:
    """Authenticate with email and password; set both session cookies."""
    resp = JSONResponse(status_code=200, content=MessageResponse(message="Login Successful").model_dump())
    service.login(body.email, body.password, resp)
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.get("/auth/user", response_model=UserResponse)
def current_user(user: User = Depends(get_current_user)) -> UserResponse:
    """Return the account behind the access cookie."""
    return UserResponse.from_user(user)


@router.post("/auth/refresh", response_model=MessageResponse)
def refresh(request: Request, service: AuthService = Depends(get_auth_service)) -> JSONResponse:
    """Issue a fresh access cookie. The refresh cookie is left untouched."""
    resp = JSONResponse(status_code=200, content=MessageResponse(message="Successfully Refreshed").model_dump())
    service.refresh(request.cookies.get(REFRESH_COOKIE), resp)
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.api_route("/auth/logout", methods=["GET", "POST"], response_model=MessageResponse)
def logout(service: AuthService = Depends(get_auth_service)) -> JSONResponse:
    """Clear both session cookies and end the session."""
    resp = JSONResponse(content=MessageResponse(message="Logout Successful").model_dump())
    service.logout(resp)
    return resp
