"""Book database table model."""

from sqlmodel import Field

from src.bookstore.entities._base import EntityTable


class BookTable(EntityTable, table=True):
    """Database persistence model for books.

    Business columns are nullable; rows written by other clients may carry
    NULLs, which the entity reads back as zero values.
    """

    __tablename__ = "books"

    book_name: str | None = Field(default="")
    author: str | None = Field(default="")
    price: float | None = Field(default=0.0)
