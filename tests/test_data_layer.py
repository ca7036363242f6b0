"""Data layer tests.

Covers the Book entity and payload, the table model and the repository,
using an in-memory SQLite database for the persistence parts.
"""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, select

from src.bookstore.core.errors import NotFoundError, PersistenceError
from src.bookstore.entities.book import Book, BookPayload, BookRepository, BookTable


class TestBookEntity:
    """Test Book domain entity and request payload."""

    def test_payload_defaults_are_zero_values(self):
        payload = BookPayload()

        assert payload.book_name == ""
        assert payload.author == ""
        assert payload.price == 0.0

    def test_payload_ignores_unknown_keys(self):
        payload = BookPayload.model_validate(
            {"id": 7, "book_name": "Dune", "created_at": "2020-01-01", "isbn": "x"}
        )

        assert payload.model_dump() == {"book_name": "Dune", "author": "", "price": 0.0}

    def test_payload_null_means_zero_value(self):
        payload = BookPayload.model_validate({"book_name": None, "price": None})

        assert payload.book_name == ""
        assert payload.price == 0.0

    def test_payload_tracks_which_fields_were_sent(self):
        payload = BookPayload.model_validate({"price": 3})

        assert payload.model_dump(exclude_unset=True) == {"price": 3.0}

    @pytest.mark.parametrize(
        "body",
        [
            {"book_name": 1},
            {"author": ["a"]},
            {"price": "1.0"},
            {"price": False},
            {"price": float("nan")},
            {"price": float("inf")},
        ],
    )
    def test_payload_rejects_wrong_types(self, body):
        with pytest.raises(PydanticValidationError):
            BookPayload.model_validate(body)

    def test_book_equality_ignores_timestamps(self):
        from datetime import UTC, datetime

        book1 = Book(id=1, book_name="A", author="B", price=1.0)
        book2 = Book(id=1, book_name="A", author="B", price=1.0, created_at=datetime.now(UTC))
        book3 = Book(id=2, book_name="A", author="B", price=1.0)

        assert book1 == book2
        assert book1 != book3
        assert hash(book1) == hash(book2)

    def test_entity_from_table_with_null_columns(self):
        table = BookTable(id=3, book_name=None, author=None, price=None)

        book = Book.model_validate(table, from_attributes=True)

        assert book.id == 3
        assert book.book_name == ""
        assert book.author == ""
        assert book.price == 0.0


class TestBookTable:
    """Test Book database table operations."""

    def test_ids_are_assigned_by_the_database(self, session: Session):
        first = BookTable(book_name="One")
        second = BookTable(book_name="Two")
        session.add_all([first, second])
        session.commit()

        assert first.id is not None
        assert second.id is not None
        assert first.id != second.id

    def test_timestamps_are_populated(self, session: Session):
        row = BookTable(book_name="Stamped")
        session.add(row)
        session.commit()
        session.refresh(row)

        assert row.created_at is not None
        assert row.updated_at is not None
        assert row.deleted_at is None

    def test_table_name(self):
        assert BookTable.__tablename__ == "books"

    def test_rows_inserted_outside_the_orm(self, session: Session, book_repo: BookRepository):
        session.connection().execute(
            text("INSERT INTO books (book_name, price) VALUES ('Raw', NULL)")
        )
        session.commit()

        [book] = book_repo.list_all()

        assert book.book_name == "Raw"
        assert book.price == 0.0
        assert book.created_at is not None
        assert book.updated_at is not None


class TestBookRepository:
    """Test Book repository operations."""

    def test_create_and_get(self, book_repo: BookRepository):
        created = book_repo.create(BookPayload(book_name="Dune", author="Herbert", price=9.5))

        fetched = book_repo.get(created.id)

        assert fetched == created
        assert fetched.book_name == "Dune"

    def test_get_missing_raises_not_found(self, book_repo: BookRepository):
        with pytest.raises(NotFoundError):
            book_repo.get(12345)

    def test_list_all_orders_by_id(self, book_repo: BookRepository):
        ids = [book_repo.create(BookPayload(book_name=name)).id for name in "cab"]

        assert [book.id for book in book_repo.list_all()] == sorted(ids)

    def test_replace_resets_omitted_fields(self, book_repo: BookRepository):
        created = book_repo.create(BookPayload(book_name="T", author="A", price=2.0))

        updated = book_repo.replace(created.id, BookPayload.model_validate({"author": "B"}))

        assert updated.id == created.id
        assert updated.book_name == ""
        assert updated.author == "B"
        assert updated.price == 0.0

    def test_patch_keeps_omitted_fields(self, book_repo: BookRepository):
        created = book_repo.create(BookPayload(book_name="T", author="A", price=2.0))

        updated = book_repo.patch(created.id, BookPayload.model_validate({"author": "B"}))

        assert updated.book_name == "T"
        assert updated.author == "B"
        assert updated.price == 2.0

    def test_update_missing_raises_not_found(self, book_repo: BookRepository):
        with pytest.raises(NotFoundError):
            book_repo.replace(999, BookPayload())

    def test_delete_is_soft(self, book_repo: BookRepository, session: Session):
        created = book_repo.create(BookPayload(book_name="Soft"))

        book_repo.delete(created.id)

        with pytest.raises(NotFoundError):
            book_repo.get(created.id)
        row = session.exec(select(BookTable).where(BookTable.id == created.id)).one()
        assert row.deleted_at is not None

    def test_delete_missing_raises_not_found(self, book_repo: BookRepository):
        with pytest.raises(NotFoundError):
            book_repo.delete(999)

    def test_database_errors_become_persistence_errors(self):
        session = MagicMock(spec=Session)
        session.exec.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        repo = BookRepository(session)

        with pytest.raises(PersistenceError, match="db down"):
            repo.list_all()
        session.rollback.assert_called_once()

    def test_failed_commit_rolls_back(self):
        session = MagicMock(spec=Session)
        session.commit.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
        repo = BookRepository(session)

        with pytest.raises(PersistenceError):
            repo.create(BookPayload(book_name="Lost"))
        session.rollback.assert_called_once()
