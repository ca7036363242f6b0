"""Book repository for data access operations."""

from collections.abc import Callable
from typing import TypeVar

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from src.bookstore.core.errors import NotFoundError, PersistenceError
from src.bookstore.entities._base import utcnow

from .entity import Book, BookPayload
from .table import BookTable

T = TypeVar("T")


class BookRepository:
    """Data-access layer for books.

    Every method performs a single persistence operation and commits it.
    Soft-deleted rows are invisible to all of them.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _run(self, operation: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except SQLAlchemyError as e:
            self._session.rollback()
            logger.error("Book {} failed", operation, error_type=type(e).__name__, error_message=str(e))
            raise PersistenceError(str(e)) from e

    def _get_row(self, book_id: int) -> BookTable:
        statement = select(BookTable).where(
            BookTable.id == book_id, BookTable.deleted_at.is_(None)  # type: ignore[union-attr]
        )
        row = self._run("lookup", lambda: self._session.exec(statement).first())
        if row is None:
            raise NotFoundError("Book not found")
        return row

    def _save(self, operation: str, row: BookTable) -> Book:
        def save() -> BookTable:
            self._session.add(row)
            self._session.commit()
            self._session.refresh(row)
            return row

        saved = self._run(operation, save)
        return Book.model_validate(saved, from_attributes=True)

    def list_all(self) -> list[Book]:
        """Return every live book ordered by id."""
        statement = (
            select(BookTable)
            .where(BookTable.deleted_at.is_(None))  # type: ignore[union-attr]
            .order_by(BookTable.id)
        )
        rows = self._run("list", lambda: self._session.exec(statement).all())
        return [Book.model_validate(row, from_attributes=True) for row in rows]

    def get(self, book_id: int) -> Book:
        """Return the book with ``book_id`` or raise NotFoundError."""
        return Book.model_validate(self._get_row(book_id), from_attributes=True)

    def create(self, payload: BookPayload) -> Book:
        """Insert a new book; the database assigns the id."""
        row = BookTable(**payload.model_dump())
        book = self._save("create", row)
        logger.info("Book created", book_id=book.id)
        return book

    def replace(self, book_id: int, payload: BookPayload) -> Book:
        """Overwrite every business field of ``book_id`` (full replace).

        Fields missing from the payload take their zero value.
        """
        return self._update(book_id, payload.model_dump())

    def patch(self, book_id: int, payload: BookPayload) -> Book:
        """Overwrite only the fields present in the payload."""
        return self._update(book_id, payload.model_dump(exclude_unset=True))

    def _update(self, book_id: int, values: dict) -> Book:
        row = self._get_row(book_id)
        for field, value in values.items():
            setattr(row, field, value)
        row.id = book_id
        row.updated_at = utcnow()
        book = self._save("update", row)
        logger.info("Book updated", book_id=book_id, fields=sorted(values))
        return book

    def delete(self, book_id: int) -> None:
        """Soft-delete ``book_id`` by stamping its ``deleted_at`` column."""
        row = self._get_row(book_id)
        row.deleted_at = utcnow()
        self._save("delete", row)
        logger.info("Book deleted", book_id=book_id)
