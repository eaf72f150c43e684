"""
auth/store.py -- SQLAlchemy Core persistence layer for user credentials.

Pattern: Repository + Data Mapper (same as books/store.py).
UserStore is the repository; _row_to_user is the mapper.
Service and route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Email uniqueness is a UNIQUE constraint on users.email, enforced by the
  database at write time. Two concurrent registrations for the same email
  both reach INSERT; the database accepts exactly one and the other gets an
  IntegrityError, which save() turns into DuplicateEmailError. There is no
  read-then-write check in Python -- that would race.

DB path: bookshelf.db at the repository root unless DATABASE_URL says
otherwise (see core.config).

Layer rule: no imports from api/ or books/.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timezone

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(36), primary_key=True),  # UUID4
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("password", Text, nullable=False),  # bcrypt hash
    Column("created_at", String(32), nullable=False),
)


class DuplicateEmailError(Exception):
    """save() was refused because the email is already registered."""


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block on a writer.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore("sqlite:///bookshelf.db")
        saved = store.save(User(name="Ada", email="ada@example.com", password=hasher.hash("pw")))
        store.find_by_email("ada@example.com")
        store.close()

    Database errors other than the email conflict propagate as
    sqlalchemy.exc.SQLAlchemyError; AuthService maps them to InternalError.
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def find_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def find_by_id(self, user_id: str) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def save(self, user: User) -> User:
        """Insert a new user and return it with id and created_at filled in.

        user.password must already be a hash. The caller's object is not
        modified.

        Raises DuplicateEmailError if the email is already registered.
        """
        saved = replace(user, id=str(uuid.uuid4()), created_at=_now_iso())
        try:
            with self.engine.connect() as conn:
                conn.execute(
                    _users.insert().values(
                        id=saved.id,
                        name=saved.name,
                        email=saved.email,
                        password=saved.password,
                        created_at=saved.created_at,
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            raise DuplicateEmailError(saved.email) from exc
        return saved

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        password=row.password,
        created_at=row.created_at,
    )
