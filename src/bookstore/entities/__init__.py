"""Entities organized by business concept.

Each entity package holds its domain model (entity.py), its persistence
model (table.py) and its data access layer (repository.py).
"""

from .book import Book, BookPayload, BookRepository, BookTable

__all__ = ["Book", "BookPayload", "BookRepository", "BookTable"]
