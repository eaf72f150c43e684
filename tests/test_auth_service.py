"""Unit tests for auth/service.py -- AuthService outcomes without HTTP.

Covers:
- register: blank or null fields, over-long password, hashing, duplicate
  email, store failure -> InternalError
- login: blank fields, undifferentiated failures, cookies only on success,
  dummy verification for unknown emails
- authenticate: missing / invalid / expired token, deleted account
- refresh: no rotation, missing / wrong-kind token
- logout: always clears both cookies
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError
from starlette.responses import Response

from auth.cookies import ACCESS_COOKIE, REFRESH_COOKIE
from auth.errors import (
    DuplicateUserError,
    InternalError,
    InvalidCredentialsError,
    MissingFieldsError,
    PasswordTooLongError,
    UnauthorizedError,
)


def _cookies(resp: Response) -> dict[str, str]:
    """Map cookie name -> raw Set-Cookie header for a starlette Response."""
    result = {}
    for key, value in resp.raw_headers:
        if key == b"set-cookie":
            header = value.decode("latin-1")
            result[header.split("=", 1)[0]] = header
    return result


def _cookie_value(resp: Response, name: str) -> str:
    return _cookies(resp)[name].split("=", 1)[1].split(";", 1)[0]


# ---------------------------------------------------------------------------
# register
# ---------------------------------------------------------------------------


class TestRegister:
    @pytest.mark.parametrize(
        "name,email,password",
        [
            ("", "a@b.com", "pw"),
            ("A", "   ", "pw"),
            ("A", "a@b.com", ""),
            ("A", "a@b.com", " \t "),
            (None, "a@b.com", "pw"),
        ],
    )
    def test_blank_field_rejected_before_io(self, service, name, email, password):
        service.store = MagicMock()
        with pytest.raises(MissingFieldsError):
            service.register(name, email, password)
        service.store.save.assert_not_called()

    def test_stores_hash_not_plaintext(self, service):
        user = service.register("A", "a@b.com", "pw12345")
        assert user.id
        assert user.password != "pw12345"
        assert service.hasher.verify("pw12345", user.password)

    def test_multibyte_password_over_72_bytes_rejected_before_io(self, service):
        service.store = MagicMock()
        with pytest.raises(PasswordTooLongError):
            service.register("A", "a@b.com", "é" * 40)
        service.store.save.assert_not_called()

    def test_duplicate_email(self, service):
        service.register("A", "a@b.com", "pw12345")
        with pytest.raises(DuplicateUserError):
            service.register("B", "a@b.com", "other-pw")

    def test_store_failure_maps_to_internal_error(self, service):
        service.store = MagicMock()
        service.store.save.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))
        with pytest.raises(InternalError) as excinfo:
            service.register("A", "a@b.com", "pw12345")
        assert "disk" not in excinfo.value.message


# ---------------------------------------------------------------------------
# login
# ---------------------------------------------------------------------------


class TestLogin:
    def test_success_sets_both_cookies(self, service):
        service.register("A", "a@b.com", "pw12345")
        resp = Response()
        service.login("a@b.com", "pw12345", resp)
        cookies = _cookies(resp)
        assert set(cookies) == {ACCESS_COOKIE, REFRESH_COOKIE}

    @pytest.mark.parametrize("email,password", [("", "pw"), ("a@b.com", ""), ("  ", "  "), (None, None)])
    def test_blank_fields(self, service, email, password):
        with pytest.raises(MissingFieldsError):
            service.login(email, password, Response())

    def test_wrong_password_and_unknown_email_are_indistinguishable(self, service):
        service.register("A", "a@b.com", "pw12345")

        with pytest.raises(InvalidCredentialsError) as wrong_pw:
            service.login("a@b.com", "wrong", Response())
        with pytest.raises(InvalidCredentialsError) as unknown:
            service.login("nobody@b.com", "pw12345", Response())

        assert wrong_pw.value.to_dict() == unknown.value.to_dict()
        assert wrong_pw.value.status_code == unknown.value.status_code == 401

    def test_unknown_email_still_runs_bcrypt(self, service):
        service.hasher = MagicMock(wraps=service.hasher)
        with pytest.raises(InvalidCredentialsError):
            service.login("nobody@b.com", "pw12345", Response())
        service.hasher.verify_dummy.assert_called_once_with("pw12345")

    def test_failed_login_sets_no_cookies(self, service):
        service.register("A", "a@b.com", "pw12345")
        resp = Response()
        with pytest.raises(InvalidCredentialsError):
            service.login("a@b.com", "wrong", resp)
        assert _cookies(resp) == {}

    def test_store_failure_maps_to_internal_error(self, service):
        service.store = MagicMock()
        service.store.find_by_email.side_effect = OperationalError("SELECT", {}, Exception("gone"))
        resp = Response()
        with pytest.raises(InternalError):
            service.login("a@b.com", "pw12345", resp)
        assert _cookies(resp) == {}


# ---------------------------------------------------------------------------
# authenticate / refresh / logout
# ---------------------------------------------------------------------------


class TestAuthenticate:
    def _login(self, service) -> Response:
        service.register("A", "a@b.com", "pw12345")
        resp = Response()
        service.login("a@b.com", "pw12345", resp)
        return resp

    def test_returns_registered_user(self, service):
        resp = self._login(service)
        user = service.authenticate(_cookie_value(resp, ACCESS_COOKIE))
        assert user.email == "a@b.com"
        assert user.name == "A"

    @pytest.mark.parametrize("token", [None, "", "garbage"])
    def test_missing_or_invalid_token(self, service, token):
        with pytest.raises(UnauthorizedError):
            service.authenticate(token)

    def test_expired_token(self, service, clock):
        resp = self._login(service)
        clock.advance(3600)
        with pytest.raises(UnauthorizedError):
            service.authenticate(_cookie_value(resp, ACCESS_COOKIE))

    def test_refresh_token_is_not_an_access_token(self, service):
        resp = self._login(service)
        with pytest.raises(UnauthorizedError):
            service.authenticate(_cookie_value(resp, REFRESH_COOKIE))

    def test_deleted_account(self, service):
        token = service.access_tokens.issue("00000000-0000-0000-0000-000000000000")
        with pytest.raises(UnauthorizedError):
            service.authenticate(token)


class TestRefresh:
    def test_issues_new_access_cookie_only(self, service, clock):
        service.register("A", "a@b.com", "pw12345")
        login_resp = Response()
        service.login("a@b.com", "pw12345", login_resp)
        refresh_token = _cookie_value(login_resp, REFRESH_COOKIE)

        clock.advance(2 * 3600)  # original access token now expired
        resp = Response()
        service.refresh(refresh_token, resp)

        assert set(_cookies(resp)) == {ACCESS_COOKIE}
        assert service.authenticate(_cookie_value(resp, ACCESS_COOKIE)).email == "a@b.com"

    def test_same_refresh_token_works_twice(self, service):
        service.register("A", "a@b.com", "pw12345")
        login_resp = Response()
        service.login("a@b.com", "pw12345", login_resp)
        refresh_token = _cookie_value(login_resp, REFRESH_COOKIE)

        service.refresh(refresh_token, Response())
        service.refresh(refresh_token, Response())

    @pytest.mark.parametrize("token", [None, "", "garbage"])
    def test_missing_or_invalid(self, service, token):
        resp = Response()
        with pytest.raises(UnauthorizedError):
            service.refresh(token, resp)
        assert _cookies(resp) == {}

    def test_access_token_cannot_refresh(self, service):
        with pytest.raises(UnauthorizedError):
            service.refresh(service.access_tokens.issue("user-1"), Response())

    def test_expired_refresh_token(self, service, clock):
        token = service.refresh_tokens.issue("user-1")
        clock.advance(7 * 24 * 3600)
        with pytest.raises(UnauthorizedError):
            service.refresh(token, Response())


def test_logout_clears_both_cookies(service):
    resp = Response()
    service.logout(resp)
    cookies = _cookies(resp)
    assert set(cookies) == {ACCESS_COOKIE, REFRESH_COOKIE}
    assert all("Max-Age=0" in h for h in cookies.values())
