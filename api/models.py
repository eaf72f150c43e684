"""
API request and response models for Bookshelf REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are separate from the dataclasses in auth/models.py and
books/models.py, which own the internal domain representation. Route handlers
map between the two.

Credential request fields are Optional and default to None rather than being
required: a null, blank or missing field is a MissingFieldsError (400) decided
by AuthService, not a schema validation failure (422). Password length is not
capped here; PasswordHasher enforces bcrypt's 72-byte limit on the encoded
value.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import User
from books.models import Book


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register."""

    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = None


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = None


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a User. The password hash is never part of it."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(id=user.id, name=user.name, email=user.email, created_at=user.created_at or "")


class MessageResponse(BaseModel):
    """Plain acknowledgement body (login, refresh, logout, delete)."""

    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Errors / health
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------


class BookCreate(BaseModel):
    """Request body for POST /api/v1/books."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    pages: int = Field(ge=1)


class BookUpdate(BaseModel):
    """Request body for PUT /api/v1/books/{book_id}. Every field optional."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    author: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    pages: Optional[int] = Field(default=None, ge=1)


class BookResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    author: str
    description: Optional[str]
    pages: int
    created_by: Optional[str]
    created_at: str

    @classmethod
    def from_book(cls, book: Book) -> "BookResponse":
        return cls(
            id=book.id,
            title=book.title,
            author=book.author,
            description=book.description,
            pages=book.pages,
            created_by=book.created_by,
            created_at=book.created_at,
        )
