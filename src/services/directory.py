"""
Worker directory lookup by canonical email.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from src.dataverse import schema
from src.dataverse.client import DataverseClient
from src.dataverse.query import Eq, ODataQuery
from src.errors import DirectoryLookupError
from src.identity.normalizer import CanonicalEmail

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkerRecord:
    name: str
    email: str
    business_unit_id: uuid.UUID


class WorkerDirectory:
    """Finds the caller's row in the worker master table."""

    def __init__(self, client: DataverseClient):
        self.client = client

    def find(self, email: CanonicalEmail) -> WorkerRecord:
        query = (
            ODataQuery(schema.WORKER_ENTITY_SET)
            .select(schema.WORKER_NAME, schema.OWNING_BUSINESS_UNIT)
            .where(Eq(schema.WORKER_MAIL, email.value))
            .top(1)
        )
        rows = self.client.fetch(query)
        if not rows:
            logger.info(f"No worker registered for {email.value}")
            raise DirectoryLookupError(
                f"{email.value} is not registered in the worker directory"
            )

        row = rows[0]
        try:
            business_unit_id = uuid.UUID(str(row.get(schema.OWNING_BUSINESS_UNIT)))
        except ValueError:
            logger.warning(f"Worker {email.value} has no owning business unit")
            raise DirectoryLookupError(
                f"{email.value} is not assigned to a business unit"
            ) from None

        return WorkerRecord(
            name=row.get(schema.WORKER_NAME) or "",
            email=email.value,
            business_unit_id=business_unit_id,
        )
