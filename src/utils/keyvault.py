"""
Key Vault Utilities
"""

import logging
import os
from typing import Optional

from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient

logger = logging.getLogger(__name__)


class KeyVaultManager:
    def __init__(self, vault_url: Optional[str] = None, client=None):
        self.vault_url = vault_url or os.getenv("AZURE_KEYVAULT_URL")
        if not self.vault_url:
            raise ValueError(
                "Key Vault URL not provided and AZURE_KEYVAULT_URL not set"
            )
        if client is None:
            client = SecretClient(
                vault_url=self.vault_url, credential=DefaultAzureCredential()
            )
        self.client = client

    def get_secret(self, secret_name: str) -> str:
        try:
            secret = self.client.get_secret(secret_name)
            return secret.value
        except Exception as e:
            raise Exception(f"Failed to get secret '{secret_name}': {str(e)}") from e


def load_secrets_from_keyvault(
    manager: KeyVaultManager, secret_names: list
) -> dict[str, str]:
    """Read the named secrets, skipping the ones that cannot be fetched."""
    secrets: dict[str, str] = {}
    for secret_name in secret_names:
        try:
            secrets[secret_name] = manager.get_secret(secret_name)
        except Exception as e:
            logger.warning(f"Failed to load secret '{secret_name}': {e}")
    return secrets
