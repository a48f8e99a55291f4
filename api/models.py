"""
API request and response models for the bookstore REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in books/models.py and
auth/models.py, which own the internal domain representation. Route handlers
map between the two.

Request models are the validation step: a body that is missing a field or
carries the wrong type never reaches a handler. FastAPI raises
RequestValidationError, which api/main.py renders as a 422.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from books.models import Book

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class BookCreate(BaseModel):
    """Request body for POST /books."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    # strict: booleans and numeric strings are type errors, JSON ints are fine.
    price: float = Field(ge=0, allow_inf_nan=False, strict=True)


class BookUpdate(BaseModel):
    """Request body for PUT /books/{book_id}.

    Every field is optional. Omitted fields and explicit nulls both mean
    "keep the stored value".
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    author: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False, strict=True)


class Credentials(BaseModel):
    """Request body for POST /register and POST /login."""

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class BookResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    author: str
    price: float

    @classmethod
    def from_book(cls, book: Book) -> "BookResponse":
        """Build a BookResponse from the domain dataclass."""
        return cls(id=book.id, name=book.name, author=book.author, price=book.price)


class MessageResponse(BaseModel):
    """Acknowledgement with no payload beyond a status message."""

    model_config = ConfigDict(frozen=True)

    message: str


class BookCreatedResponse(MessageResponse):
    """Response for POST /books -- the acknowledgement plus the new row's id."""

    id: int


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str
    version: str
    components: dict[str, str]
