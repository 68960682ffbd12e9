"""
HTTP GET /api/dispatches
========================
Dispatch records for the signed-in worker's business unit.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import azure.functions as func

from src.config.settings import Settings, get_settings
from src.dataverse.client import DataverseClient
from src.identity.normalizer import IdentityNormalizer
from src.identity.principal import principal_from_headers
from src.services.directory import WorkerDirectory
from src.services.dispatch import DispatchService
from src.storage.sas import SignedUrlIssuer
from tracing.logger import log, new_trace_id

# Import the shared FunctionApp instance
from .. import app
from ..responses import run_handler


def list_dispatches(
    req: func.HttpRequest,
    settings: Settings,
    *,
    client: Optional[DataverseClient] = None,
    issuer: Optional[SignedUrlIssuer] = None,
    normalizer: Optional[IdentityNormalizer] = None,
) -> Dict[str, Any]:
    """
    Resolve the caller and return their dispatch records.

    Collaborators default to the real implementations built from ``settings``.
    """
    settings.require_dataverse()
    trace_id = new_trace_id()

    principal = principal_from_headers(req.headers)
    email = (normalizer or IdentityNormalizer()).normalize(principal)
    log(
        "identity_resolved",
        trace_id,
        raw=email.raw_value,
        canonical=email.value,
        source=email.source.value,
        low_confidence=email.low_confidence,
    )

    client = client or DataverseClient(settings)
    worker = WorkerDirectory(client).find(email)
    log("worker_found", trace_id, business_unit=str(worker.business_unit_id))

    if issuer is None and settings.attachments_configured:
        issuer = SignedUrlIssuer(
            settings.storage_connection_string, ttl_seconds=settings.sas_ttl_seconds
        )
    service = DispatchService(
        client,
        issuer,
        container=settings.attachment_container,
        attachment_field=settings.attachment_field,
    )
    records = service.list_for(worker)
    log("dispatches_listed", trace_id, count=len(records))

    return {
        "user": {
            "name": worker.name,
            "email": email.value,
            "identitySource": email.source.value,
            "lowConfidence": email.low_confidence,
        },
        "records": records,
    }


@app.function_name(name="dispatches")
@app.route(route="dispatches", methods=["GET"])
def dispatches(req: func.HttpRequest) -> func.HttpResponse:
    return run_handler("dispatches", lambda: list_dispatches(req, get_settings()))
