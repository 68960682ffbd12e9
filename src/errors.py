"""
Error taxonomy shared by the HTTP functions.

Every error carries a short machine-checkable ``reason`` and a human-readable
``detail``. Handlers turn them into JSON bodies; nothing else (stack traces,
upstream bodies, secrets) leaves the process.
"""

from __future__ import annotations

from typing import Optional


class PortalError(Exception):
    """Base class for errors that map onto an HTTP response."""

    reason = "internal_error"
    status_code = 500

    def __init__(self, detail: str = "Unexpected error"):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"error": self.reason, "detail": self.detail}


class ConfigurationError(PortalError):
    """Required settings are missing or malformed."""

    reason = "configuration_error"
    status_code = 500


class IdentityResolutionError(PortalError):
    """No usable canonical email could be derived for the caller."""

    reason = "unauthenticated"
    status_code = 401


class DirectoryLookupError(PortalError):
    """The caller is not registered in the worker directory."""

    reason = "not_registered"
    status_code = 403


class UpstreamTransportError(PortalError):
    """A downstream service answered with a non-success status or failed."""

    reason = "upstream_error"
    status_code = 502

    def __init__(self, service: str, status: Optional[int] = None):
        detail = f"{service} request failed"
        if status is not None:
            detail += f" with status {status}"
        super().__init__(detail)
        self.service = service
        self.status = status


class SigningError(PortalError):
    """Attachment URL generation failed. Never returned to the client."""

    reason = "signing_failed"
    status_code = 500


class RequestValidationError(PortalError):
    """The request body is missing fields or holds bad values."""

    reason = "invalid_request"
    status_code = 400
