"""
auth/service.py -- Register / login / authenticate / refresh / logout.

AuthService composes the credential store, the password hasher, the two token
issuers and the cookie manager. Each public method ends in exactly one
outcome: it returns normally, or it raises one AuthError subclass.

Ordering rules:
  - Blank-field checks run before any store I/O or hashing.
  - Cookies are written only after every fallible step has succeeded, so a
    failed operation never leaves a half-set session on the response.
  - Store failures (sqlalchemy.exc.SQLAlchemyError) are logged here and
    re-raised as InternalError. Nothing from the exception text reaches the
    client.

Login timing [T1]: an unknown email still pays for one bcrypt verification
(PasswordHasher.verify_dummy), and both failure causes raise the same
InvalidCredentialsError.

Refresh does not rotate the refresh token. The same refresh cookie keeps
minting access tokens until it expires.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import Response

from auth.cookies import SessionCookies
from auth.errors import (
    DuplicateUserError,
    InternalError,
    InvalidCredentialsError,
    MissingFieldsError,
    UnauthorizedError,
)
from auth.models import User
from auth.passwords import PasswordHasher
from auth.store import DuplicateEmailError, UserStore
from auth.tokens import TokenError, TokenIssuer

logger = logging.getLogger("bookshelf.auth")


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


class AuthService:
    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        access_tokens: TokenIssuer,
        refresh_tokens: TokenIssuer,
        cookies: SessionCookies,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.access_tokens = access_tokens
        self.refresh_tokens = refresh_tokens
        self.cookies = cookies

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, name: str | None, email: str | None, password: str | None) -> User:
        """Create a user and return the stored record.

        Raises MissingFieldsError, PasswordTooLongError, DuplicateUserError or
        InternalError.
        """
        if _blank(name) or _blank(email) or _blank(password):
            raise MissingFieldsError()

        candidate = User(name=name, email=email, password=self.hasher.hash(password))
        try:
            user = self.store.save(candidate)
        except DuplicateEmailError as exc:
            logger.info("Registration rejected: email already registered")
            raise DuplicateUserError() from exc
        except SQLAlchemyError as exc:
            logger.exception("Registration failed in credential store")
            raise InternalError() from exc

        logger.info("Registered user %s", user.id)
        return user

    # ------------------------------------------------------------------
    # Login / logout
    # ------------------------------------------------------------------

    def login(self, email: str | None, password: str | None, response: Response) -> None:
        """Verify credentials and set the access and refresh cookies on response.

        Raises MissingFieldsError, InvalidCredentialsError or InternalError.
        """
        if _blank(email) or _blank(password):
            raise MissingFieldsError()

        user = self._lookup(self.store.find_by_email, email)
        if user is None:
            # Equalize timing -- do NOT return before running bcrypt [T1]
            self.hasher.verify_dummy(password)
            logger.info("Login failed")
            raise InvalidCredentialsError()
        if not self.hasher.verify(password, user.password):
            logger.info("Login failed")
            raise InvalidCredentialsError()

        access_token = self.access_tokens.issue(user.id)
        refresh_token = self.refresh_tokens.issue(user.id)
        self.cookies.set_access_cookie(response, access_token)
        self.cookies.set_refresh_cookie(response, refresh_token)
        logger.info("Login: user %s", user.id)

    def logout(self, response: Response) -> None:
        """Clear both session cookies. Never fails."""
        self.cookies.clear(response)

    # ------------------------------------------------------------------
    # Token-driven operations
    # ------------------------------------------------------------------

    def authenticate(self, access_token: str | None) -> User:
        """Resolve the user behind an access token cookie.

        Unlike the request guard this re-reads the user, so a deleted account
        is rejected even while its token is still within TTL.

        Raises UnauthorizedError or InternalError.
        """
        if not access_token:
            raise UnauthorizedError()
        try:
            user_id = self.access_tokens.verify(access_token)
        except TokenError as exc:
            raise UnauthorizedError() from exc

        user = self._lookup(self.store.find_by_id, user_id)
        if user is None:
            logger.info("Valid access token for unknown user %s", user_id)
            raise UnauthorizedError()
        return user

    def refresh(self, refresh_token: str | None, response: Response) -> None:
        """Mint a new access token from a refresh token and set its cookie.

        The refresh token itself is neither reissued nor invalidated.

        Raises UnauthorizedError.
        """
        if not refresh_token:
            raise UnauthorizedError()
        try:
            user_id = self.refresh_tokens.verify(refresh_token)
        except TokenError as exc:
            raise UnauthorizedError() from exc

        self.cookies.set_access_cookie(response, self.access_tokens.issue(user_id))
        logger.info("Access token refreshed for user %s", user_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lookup(self, finder, key: str) -> User | None:
        try:
            return finder(key)
        except SQLAlchemyError as exc:
            logger.exception("Credential store lookup failed")
            raise InternalError() from exc
