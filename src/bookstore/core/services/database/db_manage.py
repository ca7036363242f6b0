"""Schema reconciliation run once at startup."""

from loguru import logger
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from src.bookstore.core.errors import PersistenceError
from src.bookstore.entities.book import BookTable  # noqa: F401  registers the table


class DbManageService:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_all(self) -> None:
        """Create all missing tables."""
        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def add_missing_columns(self) -> list[str]:
        """Add model columns absent from existing tables; returns what was added.

        Existing columns are never altered or dropped. Added columns are
        nullable so tables that already hold rows accept them.
        """
        inspector = inspect(self._engine)
        preparer = self._engine.dialect.identifier_preparer
        added = []

        with self._engine.begin() as connection:
            for table in SQLModel.metadata.sorted_tables:
                if not inspector.has_table(table.name):
                    continue
                existing = {column["name"] for column in inspector.get_columns(table.name)}
                for column in table.columns:
                    if column.name in existing:
                        continue
                    column_type = column.type.compile(dialect=self._engine.dialect)
                    connection.execute(
                        text(
                            f"ALTER TABLE {preparer.quote(table.name)} "
                            f"ADD {preparer.quote(column.name)} {column_type}"
                        )
                    )
                    added.append(f"{table.name}.{column.name}")
                    logger.info("Added column {}.{}", table.name, column.name)

        return added

    def migrate(self) -> None:
        """Create or alter the schema so it matches the models. Idempotent."""
        try:
            self.create_all()
            added = self.add_missing_columns()
        except SQLAlchemyError as e:
            raise PersistenceError(f"schema migration failed: {e}") from e
        logger.info("Schema migration complete", added_columns=added)
