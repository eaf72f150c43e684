"""
api/routes/v1/books.py -- Book catalogue routes for the Bookshelf REST API.

Routes:
  GET    /books             -- list all books (public)
  GET    /books/{book_id}   -- book detail (public)
  POST   /books             -- create (guarded)
  PUT    /books/{book_id}   -- partial update (guarded)
  DELETE /books/{book_id}   -- delete (guarded)

Mutations depend on require_access_token, which rejects the request before
the handler runs unless the accessToken cookie verifies. The guard does no
user lookup; create_book records the subject it resolved as created_by.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import BookCreate, BookResponse, BookUpdate, MessageResponse
from auth.dependencies import require_access_token
from books.models import Book
from books.store import BookStore

logger = logging.getLogger("bookshelf.books")

router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "not_found", "message": "Book Not Found"})


@router.get("/books", response_model=list[BookResponse])
def list_books(request: Request) -> list[BookResponse]:
    store: BookStore = request.app.state.book_store
    return [BookResponse.from_book(b) for b in store.list_books()]


@router.get("/books/{book_id}", response_model=BookResponse)
def get_book(request: Request, book_id: str) -> BookResponse:
    store: BookStore = request.app.state.book_store
    book = store.get_book(book_id)
    if book is None:
        raise _not_found()
    return BookResponse.from_book(book)


@router.post("/books", response_model=BookResponse, status_code=201)
def create_book(
    request: Request,
    body: BookCreate,
    user_id: str = Depends(require_access_token),
) -> BookResponse:
    """Add a book to the catalogue, attributed to the calling user."""
    store: BookStore = request.app.state.book_store
    book = store.create_book(
        Book(
            title=body.title,
            author=body.author,
            description=body.description,
            pages=body.pages,
            created_by=user_id,
        )
    )
    logger.info("Book %s created by user %s", book.id, user_id)
    return BookResponse.from_book(book)


@router.put("/books/{book_id}", response_model=BookResponse, dependencies=[Depends(require_access_token)])
def update_book(request: Request, book_id: str, body: BookUpdate) -> BookResponse:
    """Update the supplied fields of a book; omitted fields keep their value."""
    store: BookStore = request.app.state.book_store
    updated = store.update_book(book_id, **body.model_dump(exclude_unset=True))
    if updated is None:
        raise _not_found()
    return BookResponse.from_book(updated)


@router.delete("/books/{book_id}", response_model=MessageResponse, dependencies=[Depends(require_access_token)])
def delete_book(request: Request, book_id: str) -> MessageResponse:
    store: BookStore = request.app.state.book_store
    if not store.delete_book(book_id):
        raise _not_found()
    logger.info("Book %s deleted by user %s", book_id, request.state.user_id)
    return MessageResponse(message="Book Deleted")
