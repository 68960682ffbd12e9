"""
HTTP GET /api/health
===================
Health check endpoint for monitoring system status.
"""

from __future__ import annotations

from datetime import datetime, timezone

import azure.functions as func

from src.config.settings import Settings, get_settings

# Import the shared FunctionApp instance
from .. import app
from ..responses import run_handler


def health_status(settings: Settings) -> dict:
    """Which configuration groups are present. Never includes values."""
    configured = {
        "dataverse": settings.dataverse_configured,
        "workflow": settings.workflow_configured,
        "attachments": settings.attachments_configured,
    }
    ready = configured["dataverse"] and configured["workflow"]
    return {
        "status": "healthy" if ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "configured": configured,
    }


@app.function_name(name="health")
@app.route(route="health", methods=["GET"])
def health(req: func.HttpRequest) -> func.HttpResponse:
    """
    Health check endpoint for monitoring system status.
    """
    return run_handler("health", lambda: health_status(get_settings()))
