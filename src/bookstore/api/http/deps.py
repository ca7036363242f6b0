"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.bookstore.api.http.app_data import ApplicationDependencies
from src.bookstore.core.errors import PersistenceError
from src.bookstore.core.services import DbSessionService
from src.bookstore.entities.book import BookRepository


def get_database_service(request: Request) -> DbSessionService:
    """Get the database service built at startup."""
    app_deps: ApplicationDependencies | None = getattr(
        request.app.state, "app_dependencies", None
    )
    if app_deps is None:
        raise PersistenceError("Database not initialized")
    return app_deps.database_service


def get_db_session(
    database_service: DbSessionService = Depends(get_database_service),
) -> Iterator[Session]:
    """One session per request, closed once the handler is done."""
    session = database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_book_repository(db: Session = Depends(get_db_session)) -> BookRepository:
    return BookRepository(db)
