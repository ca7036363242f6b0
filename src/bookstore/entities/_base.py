from datetime import UTC, datetime

import sqlalchemy as sa
from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(UTC)


class Entity(BaseModel):
    """Base entity with a server-assigned integer id and audit timestamps."""

    id: int = PydanticField(description="Unique identifier for the entity")

    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


class EntityTable(SQLModel, table=False):
    """Base table with an autoincrement id, audit timestamps and a soft-delete marker."""

    id: int | None = Field(
        default=None,
        primary_key=True,
        description="Unique identifier for the entity",
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={
            "server_default": sa.func.now(),
            "onupdate": sa.func.now(),
        },
    )
    deleted_at: datetime | None = Field(default=None, index=True)
