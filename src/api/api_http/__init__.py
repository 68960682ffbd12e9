"""
Shared FunctionApp for **all** HTTP endpoints.
Static Web Apps authenticates the caller before a request reaches these
functions, so every route is anonymous at the Functions level.
"""

from __future__ import annotations

import logging
import os

import azure.functions as func
from opencensus.ext.azure.log_exporter import AzureLogHandler

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

# -------- global logging to Application Insights ----------
log = logging.getLogger("dispatch-portal.http")
log.setLevel(logging.INFO)
if ikey := os.getenv("APPINSIGHTS_KEY"):
    handler = AzureLogHandler(connection_string=f"InstrumentationKey={ikey}")
    log.addHandler(handler)
    logging.getLogger("dispatch-portal.audit").addHandler(handler)
