"""Entity: Book."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from src.bookstore.entities._base import Entity


class BookFields(BaseModel):
    """Business fields shared by the entity and the request payload.

    Every field is optional and falls back to its zero value; an explicit
    ``null`` means the same as leaving the field out.
    """

    book_name: str = Field(default="", description="Title of the book")
    author: str = Field(default="", description="Author of the book")
    price: float = Field(
        default=0.0, allow_inf_nan=False, description="Price of the book"
    )

    @field_validator("book_name", "author", "price", mode="before")
    @classmethod
    def _null_to_zero_value(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value


class Book(BookFields, Entity):
    """Book entity as stored and returned by the API."""

    def __eq__(self, other: Any) -> bool:
        """Compare books by business attributes, ignoring timestamps."""
        if not isinstance(other, Book):
            return False

        return (
            self.id == other.id
            and self.book_name == other.book_name
            and self.author == other.author
            and self.price == other.price
        )

    def __hash__(self) -> int:
        return hash((self.id, self.book_name, self.author, self.price))


class BookPayload(BookFields):
    """Request body for create and update.

    Types are checked strictly (no string-to-number coercion); unknown keys,
    ``id`` and the timestamps included, are ignored.
    """

    model_config = ConfigDict(strict=True, extra="ignore")
