"""
Read-only signed URLs for attachment blobs.

Attachments live in a private container; the browser only ever receives a
short-lived SAS URL scoped to a single blob.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional
from urllib.parse import quote

from azure.storage.blob import BlobSasPermissions, generate_blob_sas

from src.errors import SigningError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT_SUFFIX = "core.windows.net"


@dataclass(frozen=True)
class StorageAccount:
    name: str
    key: str
    blob_endpoint: str


@dataclass(frozen=True)
class SignedUrlResult:
    url: str
    issued_at: datetime
    expires_at: datetime


def parse_connection_string(connection_string: str) -> StorageAccount:
    """
    Split a storage connection string into account name, key and blob endpoint.

    Raises:
        SigningError: AccountName or AccountKey is missing
    """
    parts: Dict[str, str] = {}
    for segment in (connection_string or "").split(";"):
        if "=" in segment:
            key, value = segment.split("=", 1)
            parts[key.strip()] = value.strip()

    name = parts.get("AccountName")
    key = parts.get("AccountKey")
    if not name or not key:
        raise SigningError("Connection string must include AccountName and AccountKey")

    endpoint = parts.get("BlobEndpoint")
    if not endpoint:
        suffix = parts.get("EndpointSuffix", DEFAULT_ENDPOINT_SUFFIX)
        endpoint = f"https://{name}.blob.{suffix}"
    return StorageAccount(name=name, key=key, blob_endpoint=endpoint.rstrip("/"))


def normalize_blob_path(container_name: str, blob_path: str) -> str:
    """Make ``blob_path`` relative to the container root."""
    prefix = f"/{container_name}/"
    if blob_path.startswith(prefix):
        return blob_path[len(prefix):]
    if blob_path.startswith("/"):
        return blob_path[1:]
    return blob_path


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SignedUrlIssuer:
    """Issues read-only SAS URLs with a fixed, configurable lifetime."""

    def __init__(
        self,
        connection_string: Optional[str],
        ttl_seconds: int = 3600,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.connection_string = connection_string
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock

    def issue(
        self, container_name: str, blob_path: str, ttl_seconds: Optional[int] = None
    ) -> Optional[SignedUrlResult]:
        """
        Sign a read-only URL for one blob.

        Args:
            container_name: Container holding the blob
            blob_path: Absolute or container-relative blob path
            ttl_seconds: Overrides the issuer's default lifetime

        Returns:
            SignedUrlResult, or None when the URL cannot be produced
        """
        try:
            return self._sign(container_name, blob_path, ttl_seconds)
        except SigningError as e:
            logger.warning(f"No signed URL for {container_name}/{blob_path}: {e.detail}")
            return None

    def _sign(
        self, container_name: str, blob_path: str, ttl_seconds: Optional[int]
    ) -> SignedUrlResult:
        if not isinstance(blob_path, str):
            raise SigningError(
                f"Blob path must be a string, got {type(blob_path).__name__}"
            )
        account = parse_connection_string(self.connection_string)
        blob_name = normalize_blob_path(container_name, blob_path)
        if not blob_name:
            raise SigningError("Blob path is empty")

        issued_at = self.clock()
        ttl = self.ttl if ttl_seconds is None else timedelta(seconds=ttl_seconds)
        expires_at = issued_at + ttl

        try:
            token = generate_blob_sas(
                account_name=account.name,
                container_name=container_name,
                blob_name=blob_name,
                account_key=account.key,
                permission=BlobSasPermissions(read=True),
                start=issued_at,
                expiry=expires_at,
                protocol="https",
            )
        except Exception as e:
            raise SigningError(f"Signing failed: {type(e).__name__}") from e

        url = (
            f"{account.blob_endpoint}/{quote(container_name)}/"
            f"{quote(blob_name, safe='/')}?{token}"
        )
        return SignedUrlResult(url=url, issued_at=issued_at, expires_at=expires_at)
