"""
books/store.py -- SQLAlchemy-backed persistence layer for the book catalogue.

Uses SQLAlchemy Core (not ORM) so the dataclass in books/models.py stays the
authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change.

Pattern: Repository + Data Mapper. BookStore is the repository; _row_to_book
is the mapper. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = BookStore("sqlite:///bookshelf.db")
    book = store.create_book(Book(title="Dune", author="Herbert", pages=412))
    store.list_books()
    store.update_book(book.id, pages=420)
    store.delete_book(book.id)
    store.close()
"""

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine
from sqlalchemy.engine import Engine

from books.models import Book

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_books = Table(
    "books",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("title", String(255), nullable=False),
    Column("author", String(255), nullable=False),
    Column("description", Text),
    Column("pages", Integer, nullable=False, server_default="0"),
    Column("created_by", String(36)),
    Column("created_at", String(32), nullable=False),
)

# Columns a caller may change through update_book(). Anything else is ignored
# so a request body can never rewrite id, created_by or created_at.
_MUTABLE_FIELDS = ("title", "author", "description", "pages")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class BookStore:
    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        metadata.create_all(self.engine)

    def create_book(self, book: Book) -> Book:
        """Insert a book and return it with id and created_at assigned."""
        saved = replace(book, id=str(uuid.uuid4()), created_at=_now_iso())
        with self.engine.connect() as conn:
            conn.execute(
                _books.insert().values(
                    id=saved.id,
                    title=saved.title,
                    author=saved.author,
                    description=saved.description,
                    pages=saved.pages,
                    created_by=saved.created_by,
                    created_at=saved.created_at,
                )
            )
            conn.commit()
        return saved

    def get_book(self, book_id: str) -> Optional[Book]:
        with self.engine.connect() as conn:
            row = conn.execute(_books.select().where(_books.c.id == book_id)).fetchone()
        return _row_to_book(row) if row is not None else None

    def list_books(self) -> list[Book]:
        """Return all books, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_books.select().order_by(_books.c.created_at)).fetchall()
        return [_row_to_book(r) for r in rows]

    def update_book(self, book_id: str, **fields) -> Optional[Book]:
        """Apply a partial update. Returns the updated book, or None if not found.

        None clears description but is ignored for the required columns.
        """
        values = {k: v for k, v in fields.items() if k in _MUTABLE_FIELDS and (v is not None or k == "description")}
        with self.engine.connect() as conn:
            if values:
                result = conn.execute(_books.update().where(_books.c.id == book_id).values(**values))
                conn.commit()
                if result.rowcount == 0:
                    return None
            row = conn.execute(_books.select().where(_books.c.id == book_id)).fetchone()
        return _row_to_book(row) if row is not None else None

    def delete_book(self, book_id: str) -> bool:
        """Delete a book. Returns True if deleted, False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_books.delete().where(_books.c.id == book_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


def _row_to_book(row) -> Book:
    return Book(
        id=row.id,
        title=row.title,
        author=row.author,
        description=row.description,
        pages=row.pages,
        created_by=row.created_by,
        created_at=row.created_at,
    )
