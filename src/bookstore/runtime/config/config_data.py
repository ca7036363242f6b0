"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

import os
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field
from sqlalchemy.engine import make_url


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(default=["*"])
    allow_credentials: bool = False
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class VaultConfig(BaseModel):
    """Key vault holding the database password."""

    enabled: bool = Field(
        default=False, description="Fetch the database password from the vault"
    )
    url: str = Field(
        default="https://sqlkeyvaultdb.vault.azure.net/",
        description="Key vault endpoint",
    )
    secret_name: str = Field(
        default="sqlkeysecretdb", description="Name of the database password secret"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./bookstore.db",
        description="Database connection URL",
    )
    user: str | None = Field(default=None, description="Database username")
    name: str | None = Field(default=None, description="Database name")
    pool_size: int = Field(default=10, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")
    migrate_on_startup: bool = Field(
        default=False, description="Reconcile the schema before serving traffic"
    )
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )
    password_file: str | None = Field(
        default=None,
        description="Path to file containing database password",
    )

    @property
    def password(self) -> str | None:
        """Literal database password for deployments without a vault.

        Resolution order: mounted secrets file, environment variable, then the
        password embedded in the URL.
        """
        if self.password_file:
            try:
                with open(self.password_file) as f:
                    return f.read().strip()
            except OSError as e:
                raise ValueError(
                    f"Failed to read database password from {self.password_file}"
                ) from e

        if self.password_env_var:
            password = os.getenv(self.password_env_var)
            if password is None:
                raise ValueError(
                    f"Environment variable {self.password_env_var} not set"
                )
            return password

        return make_url(self.url).password


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="0.0.0.0", description="Application host")
    port: int = Field(default=8082, description="Application port")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    vault: VaultConfig = Field(
        default_factory=VaultConfig, description="Key vault configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )

    def warn_on_plaintext_secrets(self) -> None:
        if self.app.environment == "production" and make_url(self.database.url).password:
            logger.warning(
                "Database URL contains a password in production mode; "
                "consider using the key vault or a secrets file."
            )
