"""
api/routes/books.py -- Book catalogue CRUD routes.

Routes:
  GET    /books             -- list all books
  GET    /books/{book_id}   -- single book
  POST   /books             -- create book
  PUT    /books/{book_id}   -- partial update (omitted fields keep stored values)
  DELETE /books/{book_id}   -- delete book

Every route requires a valid session cookie (router-level dependency).

Status mapping:
  Not found -> 404 not_found (raised here from the store's None/False result).
  Path ids outside 1..2**63-1 -> 422 validation_error.
  Database failures -> StoreError raised by BookStore, rendered by the
  StoreError handler in api/main.py (500 query_failed / insert_failed / ...).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path

from api.deps import get_book_store
from api.models import BookCreate, BookCreatedResponse, BookResponse, BookUpdate, ErrorDetail, MessageResponse
from auth.dependencies import require_session
from books.models import Book
from books.store import BookStore

# Router-level dependency applies to every route registered on this router,
# so individual handlers don't each need to repeat Depends(require_session).
router = APIRouter(dependencies=[Depends(require_session)])

# SQLite INTEGER is signed 64-bit; larger ids overflow the driver, so they
# are rejected as a 422 before reaching the store.
BookId = Annotated[int, Path(ge=1, le=2**63 - 1)]


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(code="not_found", message="Book not found.").model_dump(),
    )


@router.get("/books", response_model=list[BookResponse])
def list_books(store: BookStore = Depends(get_book_store)) -> list[BookResponse]:
    """Return every book in the catalogue, oldest first."""
    return [BookResponse.from_book(b) for b in store.list_books()]


@router.get("/books/{book_id}", response_model=BookResponse)
def get_book(book_id: BookId, store: BookStore = Depends(get_book_store)) -> BookResponse:
    book = store.get_book(book_id)
    if book is None:
        raise _not_found()
    return BookResponse.from_book(book)


@router.post("/books", response_model=BookCreatedResponse, status_code=201)
def create_book(body: BookCreate, store: BookStore = Depends(get_book_store)) -> BookCreatedResponse:
    """Add a book. Duplicates are allowed; the response carries the new id."""
    book_id = store.create_book(Book(name=body.name, author=body.author, price=body.price))
    return BookCreatedResponse(message="Book Added!", id=book_id)


@router.put("/books/{book_id}", response_model=MessageResponse)
def update_book(book_id: BookId, body: BookUpdate, store: BookStore = Depends(get_book_store)) -> MessageResponse:
    """Apply a partial update.

    exclude_none drops both omitted fields and explicit nulls, so either way
    the store keeps the stored value for that column.
    """
    if not store.update_book(book_id, **body.model_dump(exclude_none=True)):
        raise _not_found()
    return MessageResponse(message="Book Updated!")


@router.delete("/books/{book_id}", response_model=MessageResponse)
def delete_book(book_id: BookId, store: BookStore = Depends(get_book_store)) -> MessageResponse:
    if not store.delete_book(book_id):
        raise _not_found()
    return MessageResponse(message="Book Deleted!")
