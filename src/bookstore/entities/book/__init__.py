"""Book entity module.

- Book / BookPayload: domain entity and request body
- BookTable: database persistence model
- BookRepository: data access layer
"""

from .entity import Book, BookPayload
from .repository import BookRepository
from .table import BookTable

__all__ = ["Book", "BookPayload", "BookTable", "BookRepository"]
