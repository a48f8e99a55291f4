"""
api/deps.py -- Store providers for route handlers.

The lifespan in api/main.py builds one engine, wraps it in a BookStore and a
UserStore, and parks them on app.state. Routes never reach into app.state
themselves; they declare Depends(get_book_store) / Depends(get_user_store),
so tests can swap either store through app.dependency_overrides or a patched
lifespan.
"""

from fastapi import Request

from auth.store import UserStore
from books.store import BookStore


def get_book_store(request: Request) -> BookStore:
    return request.app.state.book_store


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store
