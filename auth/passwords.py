"""
auth/passwords.py -- bcrypt password hashing and verification.

Passwords: bcrypt directly (no passlib wrapper). bcrypt's cost factor makes
brute-force expensive, which is what low-entropy secrets need. The policy
cost factor is 12; Settings.bcrypt_rounds exists so the test suite can lower
it.

Input limit: bcrypt accepts at most 72 bytes. The limit is on the UTF-8
encoding, not on characters, so "é" * 40 (80 bytes) is too long. hash()
raises PasswordTooLongError for such input; verify() simply never matches it.

Timing equalization: each PasswordHasher computes a dummy hash once at
construction. AuthService.login() verifies against it when the email is
unknown, so "unknown user" and "wrong password" cost the same bcrypt work and
response time does not reveal which accounts exist.

Layer rule: no imports from api/ or books/.
"""

from __future__ import annotations

import bcrypt

from auth.errors import PasswordTooLongError

DEFAULT_ROUNDS = 12

MAX_PASSWORD_BYTES = 72

_DUMMY_SECRET = "bookshelf_timing_dummy"


class PasswordHasher:
    """Salted one-way hashing with a fixed work factor.

    Usage:
        hasher = PasswordHasher()
        stored = hasher.hash("s3cret")
        hasher.verify("s3cret", stored)   # True
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        self._dummy_hash = self.hash(_DUMMY_SECRET)

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of plain, salted with a fresh salt.

        Raises PasswordTooLongError if plain encodes to more than 72 bytes.
        """
        encoded = plain.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise PasswordTooLongError()
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if plain matches hashed. Malformed hashes never match."""
        encoded = plain.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            # Could never have been stored by hash().
            return False
        try:
            return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def verify_dummy(self, plain: str) -> None:
        """Burn one verification's worth of work for an unknown account."""
        self.verify(plain, self._dummy_hash)
