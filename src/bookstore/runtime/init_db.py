"""Database bootstrap: secret lookup, connection and optional migration."""

from loguru import logger

from src.bookstore.core.errors import StartupError
from src.bookstore.core.services import (
    DbManageService,
    DbSessionService,
    KeyVaultSecretService,
)
from src.bookstore.core.services.database.db_utils import (
    get_database_url,
    resolve_database_password,
)
from src.bookstore.runtime.config.config_data import ConfigData
from src.bookstore.runtime.context import get_config


def connect_database(config: ConfigData | None = None) -> DbSessionService:
    """Resolve the password, assemble the connection string and connect.

    Raises:
        StartupError: the secret could not be fetched or the database is
            unreachable.
    """
    config = config or get_config()

    secret_service = None
    if config.vault.enabled:
        secret_service = KeyVaultSecretService(config.vault.url)

    try:
        password = resolve_database_password(config, secret_service)
    except ValueError as e:
        raise StartupError(f"failed to resolve database password: {e}") from e
    finally:
        if secret_service is not None:
            secret_service.close()

    database_service = DbSessionService(get_database_url(config, password))
    database_service.verify_connection()
    return database_service


def init_db(database_service: DbSessionService | None = None) -> None:
    """Create or alter the schema so it matches the models."""
    database_service = database_service or connect_database()
    DbManageService(database_service.engine).migrate()
    logger.info("Database schema is up to date")


if __name__ == "__main__":
    init_db()
