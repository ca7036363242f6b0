"""Azure Key Vault access for startup secrets."""

from typing import Any

from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    ResourceNotFoundError,
)
from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient
from loguru import logger

from src.bookstore.core.errors import (
    SecretAuthenticationError,
    SecretNotFoundError,
    SecretStoreError,
)


class KeyVaultSecretService:
    """Reads named secrets from an Azure Key Vault.

    Each lookup is a single round trip to the vault; nothing is cached and
    failures are not retried.
    """

    def __init__(
        self,
        vault_url: str,
        credential: Any | None = None,
        client: SecretClient | None = None,
    ):
        self._vault_url = vault_url
        if client is not None:
            self._client = client
            return

        try:
            self._client = SecretClient(
                vault_url=vault_url,
                credential=credential or DefaultAzureCredential(),
            )
        except (AzureError, ValueError) as e:
            raise SecretStoreError(
                f"failed to create key vault client for {vault_url}: {e}"
            ) from e

    @property
    def vault_url(self) -> str:
        return self._vault_url

    def get_secret(self, name: str) -> str:
        """Return the current value of secret ``name``.

        Raises:
            SecretAuthenticationError: the credential was rejected.
            SecretNotFoundError: the secret is missing or has no value.
            SecretStoreError: any other vault failure.
        """
        logger.info("Fetching secret {} from {}", name, self._vault_url)
        try:
            secret = self._client.get_secret(name)
        except ClientAuthenticationError as e:
            raise SecretAuthenticationError(
                f"failed to authenticate against {self._vault_url}: {e}"
            ) from e
        except ResourceNotFoundError as e:
            raise SecretNotFoundError(
                f"secret {name!r} not found in {self._vault_url}"
            ) from e
        except AzureError as e:
            raise SecretStoreError(f"failed to get secret {name!r}: {e}") from e

        if secret.value is None:
            raise SecretNotFoundError(f"secret {name!r} has no value")
        return secret.value

    def close(self) -> None:
        self._client.close()
