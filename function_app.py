"""
Azure Functions entry point: importing the endpoint modules registers their
routes on the shared FunctionApp.
"""

from src.api.api_http import app  # noqa: F401
from src.api.api_http import dispatches, health, update_status  # noqa: F401
