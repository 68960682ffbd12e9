"""
Dataverse Web API client (client-credentials flow, read-only queries).
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import requests
from azure.core.exceptions import AzureError
from azure.identity import ClientSecretCredential

from src.config.settings import Settings
from src.errors import UpstreamTransportError

from .query import ODataQuery

logger = logging.getLogger(__name__)

# Upstream bodies are logged, truncated to this many characters
MAX_LOGGED_BODY = 500


class DataverseClient:
    """
    Issues OData GET requests against one Dataverse organisation.

    A fresh token is requested for every client; the credential object may
    still reuse a token it already holds.
    """

    def __init__(
        self,
        settings: Settings,
        credential=None,
        session: Optional[requests.Session] = None,
    ):
        settings.require_dataverse()
        self.base_url = settings.dataverse_url
        self.api_base = f"{self.base_url}/api/data/{settings.dataverse_api_version}"
        self.timeout = settings.http_timeout_seconds
        self.credential = credential or ClientSecretCredential(
            settings.tenant_id, settings.client_id, settings.client_secret
        )
        self.session = session or requests.Session()
        self._token: Optional[str] = None

    def _access_token(self) -> str:
        if self._token is None:
            try:
                self._token = self.credential.get_token(f"{self.base_url}/.default").token
            except AzureError as e:
                logger.error(f"Token acquisition failed: {e}")
                raise UpstreamTransportError("identity") from e
        return self._token

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token()}",
            "Accept": "application/json",
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
        }

    def fetch(self, query: ODataQuery) -> List[dict]:
        """
        Run a query and return its ``value`` array.

        Raises:
            UpstreamTransportError: transport failure or non-success status
        """
        url = query.url(self.api_base)
        headers = self._headers()
        try:
            response = self.session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Dataverse request to {query.entity_set} failed: {e}")
            raise UpstreamTransportError("dataverse") from e

        if not response.ok:
            logger.error(
                f"Dataverse {query.entity_set} returned {response.status_code}: "
                f"{response.text[:MAX_LOGGED_BODY]}"
            )
            raise UpstreamTransportError("dataverse", response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Dataverse {query.entity_set} returned invalid JSON")
            raise UpstreamTransportError("dataverse", response.status_code) from e
        if not isinstance(payload, dict):
            logger.error(f"Dataverse {query.entity_set} returned a non-object body")
            raise UpstreamTransportError("dataverse", response.status_code)
        return list(payload.get("value", []))
