"""
tests/helpers.py -- Constants, a fake clock and request helpers shared by the
test modules.

The request defaults are the concrete account used throughout the suite:
name "A", email "a@b.com", password "pw12345".
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

ACCESS_SECRET = "test-access-secret-0123456789abcdef0123456789"
REFRESH_SECRET = "test-refresh-secret-fedcba9876543210fedcba98765"

EMAIL = "a@b.com"
PASSWORD = "pw12345"


class FakeClock:
    """Settable stand-in for auth.tokens.utcnow."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now = self.now + timedelta(seconds=seconds)


def register(client: TestClient, name: str = "A", email: str = EMAIL, password: str = PASSWORD):
    return client.post("/api/v1/auth/register", json={"name": name, "email": email, "password": password})


def login(client: TestClient, email: str = EMAIL, password: str = PASSWORD):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def register_and_login(client: TestClient) -> str:
    """Create the default account, log in, and return its user id."""
    user_id = register(client).json()["id"]
    assert login(client).status_code == 200
    return user_id


def set_cookie_headers(resp) -> list[str]:
    return resp.headers.get_list("set-cookie")


def cookie_header(resp, name: str) -> str:
    """Return the Set-Cookie header for one cookie name (lowercased)."""
    matches = [h for h in set_cookie_headers(resp) if h.startswith(f"{name}=")]
    assert len(matches) == 1, f"expected one Set-Cookie for {name}, got {set_cookie_headers(resp)}"
    return matches[0].lower()
