"""
books/models.py -- Domain dataclass for the book catalogue.

Pure data container with zero logic. Persistence lives in books/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Book:
    """A catalogue entry.

    created_by is the user id the auth guard resolved for the request that
    created the book. id and created_at are set by the store on insert.
    """

    title: str
    author: str
    pages: int
    description: Optional[str] = None
    created_by: Optional[str] = None
    id: Optional[str] = None  # UUID4 string
    created_at: str = ""  # ISO 8601
