"""
Audit trail for the HTTP functions.

Each request gets one trace id; every event is written as a single JSON line
on the ``dispatch-portal.audit`` logger so Application Insights can group a
request's steps. Events:

    identity_resolved   raw principal value -> canonical email, source, confidence
    worker_found        owning business unit of the matched worker
    dispatches_listed   number of dispatch records returned
    status_forwarded    dispatch id and coordinates sent to the workflow
"""

import datetime
import json
import logging
import uuid

AUDIT_LOGGER_NAME = "dispatch-portal.audit"
audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)
audit_logger.setLevel(logging.INFO)


def new_trace_id() -> str:
    """One id per request, shared by all of its audit events."""
    return uuid.uuid4().hex


def log(step: str, trace_id: str, **payload) -> dict:
    event = {
        "trace_id": trace_id,
        "event": step,
        "at": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "details": payload,
    }
    audit_logger.info(json.dumps(event, ensure_ascii=False, default=str))
    return event
