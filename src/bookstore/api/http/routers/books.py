"""Book API router with CRUD operations."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError as PydanticValidationError

from src.bookstore.api.http.deps import get_book_repository
from src.bookstore.core.errors import ValidationError
from src.bookstore.entities.book import Book, BookPayload, BookRepository

router = APIRouter(tags=["books"])

DELETED_MESSAGE = "The book is deleted successfully!"

# Largest id a signed 64-bit column can hold
_MAX_ID = 2**63 - 1


def parse_book_id(raw: str) -> int:
    """Parse a path id made only of ASCII digits."""
    if not raw.isascii() or not raw.isdigit():
        raise ValidationError("Invalid ID format")
    book_id = int(raw)
    if book_id > _MAX_ID:
        raise ValidationError("Invalid ID format")
    return book_id


def decode_payload(body: Any) -> BookPayload:
    """Decode a JSON body into the book fields it carries."""
    try:
        return BookPayload.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "body"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


@router.get("/books", response_model=list[Book])
def list_books(repository: BookRepository = Depends(get_book_repository)) -> list[Book]:
    """List all books."""
    return repository.list_all()


@router.get("/book/{book_id}", response_model=Book)
def get_book(
    book_id: str, repository: BookRepository = Depends(get_book_repository)
) -> Book:
    """Get a book by ID."""
    return repository.get(parse_book_id(book_id))


@router.post("/books", response_model=Book)
def create_book(
    body: Any = Body(...),
    repository: BookRepository = Depends(get_book_repository),
) -> Book:
    """Create a new book; any id in the body is ignored."""
    return repository.create(decode_payload(body))


@router.put("/book/{book_id}", response_model=Book)
def update_book(
    book_id: str,
    body: Any = Body(...),
    repository: BookRepository = Depends(get_book_repository),
) -> Book:
    """Replace every field of a book.

    Fields missing from the body are reset to their zero value and the id
    always stays the one from the path.
    """
    parsed_id = parse_book_id(book_id)
    # Unknown ids answer 404 before a bad body can answer 400
    repository.get(parsed_id)
    return repository.replace(parsed_id, decode_payload(body))


@router.patch("/book/{book_id}", response_model=Book)
def patch_book(
    book_id: str,
    body: Any = Body(...),
    repository: BookRepository = Depends(get_book_repository),
) -> Book:
    """Overwrite only the fields present in the body."""
    parsed_id = parse_book_id(book_id)
    # Unknown ids answer 404 before a bad body can answer 400
    repository.get(parsed_id)
    return repository.patch(parsed_id, decode_payload(body))


@router.delete("/book/{book_id}", response_model=str)
def delete_book(
    book_id: str, repository: BookRepository = Depends(get_book_repository)
) -> str:
    """Delete a book."""
    repository.delete(parse_book_id(book_id))
    return DELETED_MESSAGE
