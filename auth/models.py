"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and the auth
service do the work; routes map these onto API response models.

Layer rule: no imports from api/ or books/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered identity.

    password always holds a bcrypt hash, never the submitted secret. It stays
    on the domain object so login can verify against it, and is dropped by
    every API response model.

    email is stored exactly as submitted and compared case-sensitively.

    id and created_at are None until the store has written the record.
    """

    name: str
    email: str
    password: str  # bcrypt hash
    id: str | None = None  # UUID4 string, assigned by UserStore.save()
    created_at: str | None = None  # ISO 8601 UTC
