"""
Process configuration.

Values come from the environment (``.env`` in local development, app settings
on Azure). ``load_settings()`` builds one immutable ``Settings`` object which
is then handed to the components that need it.
"""

from __future__ import annotations

import functools
import logging
import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from dotenv import load_dotenv

from src.errors import ConfigurationError
from src.utils.keyvault import KeyVaultManager, load_secrets_from_keyvault

logger = logging.getLogger(__name__)

# Environment variable -> Key Vault secret name
KEYVAULT_SECRETS = {
    "CLIENT_SECRET": "client-secret",
    "ATTACHMENT_STORAGE_CONNECTION": "attachment-storage-connection",
}

DEFAULT_API_VERSION = "v9.2"
DEFAULT_COMPLETION_STATUS = 100000004  # choice value for "work completed"
DEFAULT_CONTAINER = "attachments"
DEFAULT_ATTACHMENT_FIELD = "new_attachment_path"
DEFAULT_SAS_TTL_SECONDS = 3600
DEFAULT_HTTP_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class Settings:
    tenant_id: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    dataverse_url: Optional[str] = None
    dataverse_api_version: str = DEFAULT_API_VERSION
    flow_url_complete: Optional[str] = None
    completion_status: int = DEFAULT_COMPLETION_STATUS
    storage_connection_string: Optional[str] = None
    attachment_container: str = DEFAULT_CONTAINER
    attachment_field: str = DEFAULT_ATTACHMENT_FIELD
    sas_ttl_seconds: int = DEFAULT_SAS_TTL_SECONDS
    http_timeout_seconds: int = DEFAULT_HTTP_TIMEOUT_SECONDS

    @property
    def dataverse_configured(self) -> bool:
        return not self._missing(_DATAVERSE_FIELDS)

    @property
    def workflow_configured(self) -> bool:
        return not self._missing(_WORKFLOW_FIELDS)

    @property
    def attachments_configured(self) -> bool:
        return bool(self.storage_connection_string)

    def require_dataverse(self) -> "Settings":
        """Fail before any external call when Dataverse access is not configured."""
        return self._require(_DATAVERSE_FIELDS)

    def require_workflow(self) -> "Settings":
        return self._require(_WORKFLOW_FIELDS)

    def _missing(self, fields: Mapping[str, str]) -> list[str]:
        return [env for attr, env in fields.items() if not getattr(self, attr)]

    def _require(self, fields: Mapping[str, str]) -> "Settings":
        missing = self._missing(fields)
        if missing:
            logger.error(f"Missing configuration: {', '.join(missing)}")
            raise ConfigurationError("The service is not fully configured")
        return self


_DATAVERSE_FIELDS = {
    "tenant_id": "TENANT_ID",
    "client_id": "CLIENT_ID",
    "client_secret": "CLIENT_SECRET",
    "dataverse_url": "DATAVERSE_URL",
}
_WORKFLOW_FIELDS = {"flow_url_complete": "FLOW_URL_COMPLETE"}


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer") from None


def settings_from_env(
    env: Mapping[str, str],
    keyvault_factory: Optional[Callable[[str], KeyVaultManager]] = None,
) -> Settings:
    """
    Build ``Settings`` from a mapping of environment variables.

    Args:
        env: Environment mapping (``os.environ`` in production)
        keyvault_factory: Builds a ``KeyVaultManager`` for a vault URL; used only
            when ``AZURE_KEYVAULT_URL`` is set and a secret is absent from ``env``

    Returns:
        Settings instance
    """
    values = {k: v for k, v in env.items() if v}

    vault_url = values.get("AZURE_KEYVAULT_URL")
    wanted = [name for name in KEYVAULT_SECRETS if name not in values]
    if vault_url and wanted:
        factory = keyvault_factory or KeyVaultManager
        secrets = load_secrets_from_keyvault(
            factory(vault_url), [KEYVAULT_SECRETS[name] for name in wanted]
        )
        for name in wanted:
            secret = secrets.get(KEYVAULT_SECRETS[name])
            if secret:
                values[name] = secret

    dataverse_url = values.get("DATAVERSE_URL")
    if dataverse_url:
        dataverse_url = dataverse_url.rstrip("/")

    return Settings(
        tenant_id=values.get("TENANT_ID"),
        client_id=values.get("CLIENT_ID"),
        client_secret=values.get("CLIENT_SECRET"),
        dataverse_url=dataverse_url,
        dataverse_api_version=values.get("DATAVERSE_API_VERSION", DEFAULT_API_VERSION),
        flow_url_complete=values.get("FLOW_URL_COMPLETE"),
        completion_status=_int_setting(
            values, "FLOW_STATUS_COMPLETE", DEFAULT_COMPLETION_STATUS
        ),
        storage_connection_string=values.get("ATTACHMENT_STORAGE_CONNECTION"),
        attachment_container=values.get("ATTACHMENT_CONTAINER", DEFAULT_CONTAINER),
        attachment_field=values.get(
            "DISPATCH_ATTACHMENT_FIELD", DEFAULT_ATTACHMENT_FIELD
        ),
        sas_ttl_seconds=_int_setting(
            values, "SAS_TTL_SECONDS", DEFAULT_SAS_TTL_SECONDS
        ),
        http_timeout_seconds=_int_setting(
            values, "HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS
        ),
    )


def load_settings() -> Settings:
    """Load ``.env`` (if any) and read settings from the process environment."""
    load_dotenv()
    return settings_from_env(os.environ)


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once on first use."""
    return load_settings()
