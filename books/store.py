"""
books/store.py -- SQLAlchemy-backed persistence layer for books.

Uses SQLAlchemy Core (not ORM) so the Book dataclass in books/models.py
remains the authoritative domain representation.

Pattern: Repository + Data Mapper. BookStore is the repository; _row_to_book
is the mapper. Route handlers never touch SQL directly.

Failure contract:
  - Missing rows are not errors: get_book() returns None, update_book() and
    delete_book() return False.
  - Any SQLAlchemyError is logged and re-raised as the matching StoreError
    subclass from core/errors.py (QueryFailed, InsertFailed, UpdateFailed,
    DeleteFailed).

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = BookStore(create_db_engine("sqlite:///mydb.sqlite"))
    book_id = store.create_book(Book(name="Dune", author="Herbert", price=9.99))
    store.update_book(book_id, price=7.5)
    store.delete_book(book_id)
"""

import logging
from typing import Optional

from sqlalchemy import Column, Float, Integer, Table, Text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from books.models import Book
from core.db import metadata
from core.errors import DeleteFailed, InsertFailed, QueryFailed, UpdateFailed

logger = logging.getLogger("bookstore.books")

# Fields a partial update may touch. Anything else passed to update_book()
# is a programming error, not user input.
_MUTABLE_FIELDS = ("name", "author", "price")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_books = Table(
    "books",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("author", Text, nullable=False),
    Column("price", Float, nullable=False),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class BookStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        _books.create(self.engine, checkfirst=True)

    def list_books(self) -> list[Book]:
        """Return every book ordered by id."""
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(_books.select().order_by(_books.c.id)).fetchall()
        except SQLAlchemyError as exc:
            logger.exception("list_books failed")
            raise QueryFailed("Failed to retrieve books.") from exc
        return [_row_to_book(r) for r in rows]

    def get_book(self, book_id: int) -> Optional[Book]:
        """Fetch a single book by ID. Returns None if not found."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_books.select().where(_books.c.id == book_id)).fetchone()
        except SQLAlchemyError as exc:
            logger.exception("get_book failed (id=%s)", book_id)
            raise QueryFailed("Failed to retrieve book.") from exc
        return _row_to_book(row) if row is not None else None

    def create_book(self, book: Book) -> int:
        """Insert a new book and return its assigned database ID."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    _books.insert().values(
                        name=book.name,
                        author=book.author,
                        price=book.price,
                    )
                )
                conn.commit()
        except SQLAlchemyError as exc:
            logger.exception("create_book failed")
            raise InsertFailed("Failed to create book.") from exc
        return result.inserted_primary_key[0]

    def update_book(self, book_id: int, **fields) -> bool:
        """Apply a partial update to an existing book.

        Accepts any subset of: name, author, price. A field that is absent or
        None keeps its stored value. The read and the write run in one
        transaction so a concurrent writer cannot interleave between them.

        Returns True if the book was updated, False if book_id was not found.
        """
        unknown = set(fields) - set(_MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown book fields: {unknown!r}")
        try:
            with self.engine.begin() as conn:
                current = conn.execute(_books.select().where(_books.c.id == book_id)).fetchone()
                if current is None:
                    return False
                merged = {
                    name: fields[name] if fields.get(name) is not None else getattr(current, name)
                    for name in _MUTABLE_FIELDS
                }
                conn.execute(_books.update().where(_books.c.id == book_id).values(**merged))
        except SQLAlchemyError as exc:
            logger.exception("update_book failed (id=%s)", book_id)
            raise UpdateFailed("Failed to update book.") from exc
        return True

    def delete_book(self, book_id: int) -> bool:
        """Delete a book. Returns True if deleted, False if no row had that ID."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(_books.delete().where(_books.c.id == book_id))
                conn.commit()
        except SQLAlchemyError as exc:
            logger.exception("delete_book failed (id=%s)", book_id)
            raise DeleteFailed("Failed to delete book.") from exc
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_book(row) -> Book:
    return Book(
        id=row.id,
        name=row.name,
        author=row.author,
        price=row.price,
    )
