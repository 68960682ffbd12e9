"""
HTTP POST /api/update-status
============================
Forwards a "work completed" notification to the workflow endpoint.
"""

from __future__ import annotations

import json
import math
from typing import Any, Dict, Optional

import azure.functions as func

from src.config.settings import Settings, get_settings
from src.errors import IdentityResolutionError, RequestValidationError
from src.identity.principal import principal_from_headers
from src.services.workflow import WorkflowTrigger
from tracing.logger import log, new_trace_id

# Import the shared FunctionApp instance
from .. import app
from ..responses import run_handler


def _coordinate(body: Dict[str, Any], name: str) -> Optional[float]:
    value = body.get(name)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise RequestValidationError(f"`{name}` must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise RequestValidationError(f"`{name}` must be a number") from None
    if not math.isfinite(number):
        raise RequestValidationError(f"`{name}` must be a finite number")
    return number


def update_status(
    req: func.HttpRequest,
    settings: Settings,
    *,
    trigger: Optional[WorkflowTrigger] = None,
) -> Dict[str, Any]:
    settings.require_workflow()

    principal = principal_from_headers(req.headers)
    if principal is None:
        raise IdentityResolutionError("No authenticated principal")

    try:
        body = json.loads(req.get_body())
    except ValueError:
        raise RequestValidationError("Invalid JSON") from None
    if not isinstance(body, dict):
        raise RequestValidationError("Request body must be a JSON object")

    dispatch_id = body.get("haishaId") or body.get("id")
    if not dispatch_id:
        raise RequestValidationError("`haishaId` is required")
    lat = _coordinate(body, "lat")
    long = _coordinate(body, "long")

    trigger = trigger or WorkflowTrigger(settings)
    payload = trigger.notify_completion(str(dispatch_id), lat, long)
    log(
        "status_forwarded",
        new_trace_id(),
        user=principal.raw_value,
        dispatch_id=payload["id"],
        lat=payload["lat"],
        long=payload["long"],
    )
    return {"message": "Completion notified", "id": payload["id"]}


@app.function_name(name="update_status")
@app.route(route="update-status", methods=["POST"])
def update_status_endpoint(req: func.HttpRequest) -> func.HttpResponse:
    return run_handler("update-status", lambda: update_status(req, get_settings()))
