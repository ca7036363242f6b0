from typing import Protocol

from loguru import logger
from sqlalchemy.engine import make_url

from src.bookstore.runtime.config.config_data import ConfigData


class SecretSource(Protocol):
    def get_secret(self, name: str) -> str: ...


def resolve_database_password(
    config: ConfigData, secret_source: SecretSource | None = None
) -> str | None:
    """Return the database password for the configured deployment variant.

    With the vault enabled the password is the vault secret; otherwise it is
    the literal one from the secrets file, environment variable or URL.
    """
    if config.vault.enabled:
        if secret_source is None:
            raise ValueError("Key vault is enabled but no secret source was given")
        return secret_source.get_secret(config.vault.secret_name)

    return config.database.password


# Build the database URL with the resolved password
def get_database_url(config: ConfigData, password: str | None = None) -> str:
    """Assemble the connection string from the configured URL and ``password``.

    ``database.user`` and ``database.name`` replace the URL's username and
    database when set.
    """
    db_config = config.database
    url = make_url(db_config.url)

    if db_config.user and db_config.user != url.username:
        url = url.set(username=db_config.user)
    if db_config.name and db_config.name != url.database:
        url = url.set(database=db_config.name)

    if password is not None:
        if url.password and url.password != password:
            logger.warning(
                "Database URL carries a password that differs from the resolved one; "
                "using the resolved password."
            )
        url = url.set(password=password)

    # render_as_string keeps the password; str(url) would mask it
    return url.render_as_string(hide_password=False)


def sanitize_database_url(url: str) -> str:
    """Connection string safe for logs."""
    return make_url(url).render_as_string(hide_password=True)
