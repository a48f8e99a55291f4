"""
books/models.py -- Domain dataclass for the book catalogue.

Pure data container with zero logic. Merging partial updates and mapping
rows lives in books/store.py; the HTTP contract lives in api/models.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Book:
    """A book on sale.

    id is None before the record is written to the database. Books have no
    uniqueness constraint -- two rows may carry the same name and author.
    """

    name: str
    author: str
    price: float
    id: Optional[int] = None
