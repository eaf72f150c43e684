"""
auth/cookies.py -- Maps access and refresh tokens onto httpOnly cookies.

Cookie attributes:
  httponly=True: JS cannot read either cookie (XSS mitigation).
  samesite="lax": sent on same-site requests and top-level cross-site GET
      navigations, not on cross-site POST -- CSRF mitigation for most cases.
  secure: only sent over HTTPS when SECURE_COOKIES=true (set in production).
  max_age: access cookie 24h, refresh cookie 7d (see core.config).

The access cookie deliberately outlives the 1h access token. An expired token
still reaches the server and is rejected as "unauthorized" instead of looking
like a client that never logged in.
"""

from __future__ import annotations

from starlette.responses import Response

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


class SessionCookies:
    """Writes and clears the session cookie pair on a response."""

    def __init__(self, access_max_age: int, refresh_max_age: int, secure: bool = False) -> None:
        self.access_max_age = access_max_age
        self.refresh_max_age = refresh_max_age
        self.secure = secure

    def set_access_cookie(self, response: Response, token: str) -> None:
        self._set(response, ACCESS_COOKIE, token, self.access_max_age)

    def set_refresh_cookie(self, response: Response, token: str) -> None:
        self._set(response, REFRESH_COOKIE, token, self.refresh_max_age)

    def clear(self, response: Response) -> None:
        """Expire both cookies. Safe to call when neither was ever set."""
        for name in (ACCESS_COOKIE, REFRESH_COOKIE):
            response.delete_cookie(name, httponly=True, samesite="lax", secure=self.secure)

    def _set(self, response: Response, name: str, token: str, max_age: int) -> None:
        response.set_cookie(
            name,
            value=token,
            httponly=True,
            samesite="lax",
            secure=self.secure,
            max_age=max_age,
        )
