"""Core services exports."""

# Database Services
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

# Secret Services
from .secrets.key_vault import KeyVaultSecretService

__all__ = [
    # Database Services
    "DbManageService",
    "DbSessionService",
    # Secret Services
    "KeyVaultSecretService",
]
