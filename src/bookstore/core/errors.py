"""Exception hierarchy shared by the API, the services and startup."""


class BookstoreError(Exception):
    """Base class for every error raised by the application.

    ``status_code`` is the HTTP status the API answers with when the error
    escapes a request handler.
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(BookstoreError):
    """Malformed path parameter or request body."""

    status_code = 400


class NotFoundError(BookstoreError):
    """No live row matches the requested id."""

    status_code = 404


class PersistenceError(BookstoreError):
    """A database operation failed."""

    status_code = 500


class StartupError(BookstoreError):
    """The process cannot start serving traffic."""


class SecretStoreError(StartupError):
    """The secret store could not be reached or answered unexpectedly."""


class SecretAuthenticationError(SecretStoreError):
    """The credential used against the secret store was rejected."""


class SecretNotFoundError(SecretStoreError):
    """The requested secret does not exist or has no value."""


class DatabaseConnectionError(StartupError):
    """The database could not be reached with the assembled connection string."""
