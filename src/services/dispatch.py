"""
Dispatch records for a worker's business unit, with attachment links.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from src.dataverse import schema
from src.dataverse.client import DataverseClient
from src.dataverse.query import Eq, ODataQuery
from src.storage.sas import SignedUrlIssuer

from .directory import WorkerRecord

logger = logging.getLogger(__name__)


class DispatchService:
    """
    Lists dispatch rows newest first.

    Attachment links are best effort: a row whose URL cannot be signed is
    returned without ``attachmentUrl``.
    """

    def __init__(
        self,
        client: DataverseClient,
        issuer: Optional[SignedUrlIssuer] = None,
        container: str = "attachments",
        attachment_field: str = "new_attachment_path",
    ):
        self.client = client
        self.issuer = issuer
        self.container = container
        self.attachment_field = attachment_field

    def list_for(self, worker: WorkerRecord) -> List[dict]:
        query = (
            ODataQuery(schema.DISPATCH_ENTITY_SET)
            .select(*schema.DISPATCH_FIELDS, self.attachment_field)
            .where(Eq(schema.OWNING_BUSINESS_UNIT, worker.business_unit_id))
            .order_by(schema.DISPATCH_DAY, descending=True)
        )
        records = self.client.fetch(query)
        return [self._with_attachment(record) for record in records]

    def _with_attachment(self, record: dict) -> dict:
        path = record.get(self.attachment_field)
        if not path or self.issuer is None:
            return record

        signed = self.issuer.issue(self.container, path)
        if signed is None:
            return record

        enriched = dict(record)
        enriched["attachmentUrl"] = signed.url
        enriched["attachmentUrlExpiresAt"] = signed.expires_at.isoformat()
        return enriched
