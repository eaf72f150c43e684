"""
auth/tokens.py -- Signed, time-limited access and refresh tokens.

Security design decisions:
  JWT: python-jose with HS256. A token carries sub (user id), iat, exp and a
       type claim ("access" or "refresh"). Verification checks the signature,
       the type, the subject and the expiry, and performs no I/O.

  Distinct secrets: the access issuer and the refresh issuer are built with
       different secrets (core.config enforces this), so a leaked access
       secret cannot mint refresh tokens. The type claim additionally stops a
       token from being replayed in the other role if the secrets were ever
       configured identically by hand.

  Expiry is checked here against an injectable clock rather than inside
       jose, so tests can pin "now" to the second. A token is rejected from
       the instant now >= exp.

  Failure detail: InvalidTokenError (malformed / forged / wrong type) and
       ExpiredTokenError both derive from TokenError. Only the debug log sees
       the difference; callers turn any TokenError into UnauthorizedError.

Stateless: there is no revocation list, so a stolen token stays
valid until it expires (1 hour for access, 7 days for refresh).

Layer rule: no imports from api/ or books/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

logger = logging.getLogger("bookshelf.auth.tokens")

_ALGORITHM = "HS256"

ACCESS = "access"
REFRESH = "refresh"

Clock = Callable[[], datetime]


class TokenError(Exception):
    """Token failed verification."""


class InvalidTokenError(TokenError):
    """Malformed, forged, or issued for another purpose."""


class ExpiredTokenError(TokenError):
    """Signature is valid but the token is past its exp claim."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def issue_token(
    subject: str,
    ttl_seconds: int,
    secret: str,
    token_type: str,
    now: datetime | None = None,
) -> str:
    """Encode a signed token for subject, valid for ttl_seconds from now."""
    issued_at = now or utcnow()
    expires_at = issued_at + timedelta(seconds=ttl_seconds)
    payload = {
        "sub": subject,
        "type": token_type,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_ALGORITHM)


def verify_token(
    token: str,
    secret: str,
    token_type: str,
    now: datetime | None = None,
) -> str:
    """Verify token and return its subject.

    Raises:
        InvalidTokenError: bad signature, unparseable token, wrong type, or
            missing claims.
        ExpiredTokenError: now is at or past the exp claim.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[_ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    subject = payload.get("sub")
    exp = payload.get("exp")
    if payload.get("type") != token_type:
        raise InvalidTokenError(f"expected a {token_type} token")
    if not isinstance(subject, str) or not subject:
        raise InvalidTokenError("missing subject")
    if not isinstance(exp, int):
        raise InvalidTokenError("missing expiry")

    current = now or utcnow()
    if current.timestamp() >= exp:
        raise ExpiredTokenError("token expired")
    return subject


class TokenIssuer:
    """Issues and verifies one kind of token with one secret and one TTL.

    The application builds two of these (see api/main.wire_state): one for
    access tokens and one for refresh tokens.
    """

    def __init__(self, secret: str, ttl_seconds: int, token_type: str, clock: Clock = utcnow) -> None:
        self._secret = secret
        self.ttl_seconds = ttl_seconds
        self.token_type = token_type
        self._clock = clock

    def issue(self, subject: str) -> str:
        return issue_token(subject, self.ttl_seconds, self._secret, self.token_type, now=self._clock())

    def verify(self, token: str) -> str:
        """Return the subject of a valid token; raise TokenError otherwise."""
        try:
            return verify_token(token, self._secret, self.token_type, now=self._clock())
        except TokenError as exc:
            # Reason stays in the debug log only -- never in a response.
            logger.debug("%s token rejected: %s (%s)", self.token_type, type(exc).__name__, exc)
            raise
