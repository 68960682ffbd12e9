"""
JSON response helpers shared by the HTTP functions.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

import azure.functions as func

from src.errors import PortalError

logger = logging.getLogger("dispatch-portal.http")


def json_response(body: Any, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body, ensure_ascii=False, default=str),
        status_code=status_code,
        mimetype="application/json",
        charset="utf-8",
    )


def error_response(error: PortalError) -> func.HttpResponse:
    return json_response(error.to_dict(), status_code=error.status_code)


def run_handler(name: str, handler: Callable[[], Any]) -> func.HttpResponse:
    """Run ``handler`` and map its outcome onto a JSON response."""
    try:
        return json_response(handler())
    except PortalError as e:
        logger.warning(f"{name} rejected: {e.reason}: {e.detail}")
        return error_response(e)
    except Exception:
        logger.exception(f"{name} failed")
        return error_response(PortalError())
