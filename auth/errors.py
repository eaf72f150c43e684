"""
auth/errors.py -- Failure taxonomy of the authentication core.

Every failure the auth service or guard can produce is one of the classes
below. Each carries the HTTP status, a machine-readable code and the only
message a client will ever see. api/main.py renders them through a single
exception handler, so no internal error detail crosses the API boundary.

Token verification failures (expired vs forged) both surface as
UnauthorizedError -- the distinction exists only inside auth/tokens.py.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class. Subclasses fix status_code, code and message."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class MissingFieldsError(AuthError):
    """A required credential field was empty or whitespace only."""

    status_code = 400
    code = "missing_fields"
    message = "Fill All Required Fields"


class PasswordTooLongError(AuthError):
    """Password exceeds bcrypt's 72-byte input limit once UTF-8 encoded."""

    status_code = 400
    code = "password_too_long"
    message = "Password Too Long"


class DuplicateUserError(AuthError):
    """Registration hit the email uniqueness constraint."""

    status_code = 409
    code = "duplicate_user"
    message = "User with same credentials already exists"


class InvalidCredentialsError(AuthError):
    """Unknown email OR wrong password. Never says which."""

    status_code = 401
    code = "invalid_credentials"
    message = "Invalid Credentials"


class UnauthorizedError(AuthError):
    """Token cookie missing, invalid, expired, or its subject no longer exists."""

    status_code = 401
    code = "unauthorized"
    message = "Unauthorized"


class InternalError(AuthError):
    """Unexpected store or infrastructure failure."""
