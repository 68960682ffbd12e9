"""
Completion notifications for the workflow-automation endpoint.

The flow on the other side updates Dataverse; this side only forwards.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from src.config.settings import Settings
from src.errors import UpstreamTransportError

logger = logging.getLogger(__name__)


class WorkflowTrigger:
    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        settings.require_workflow()
        self.url = settings.flow_url_complete
        self.status = settings.completion_status
        self.timeout = settings.http_timeout_seconds
        self.session = session or requests.Session()

    def build_payload(
        self,
        dispatch_id: str,
        lat: Optional[float],
        long: Optional[float],
        completed_at: Optional[datetime] = None,
    ) -> dict:
        completed_at = completed_at or datetime.now(timezone.utc)
        return {
            "id": dispatch_id,
            "lat": lat if lat is not None else 0,
            "long": long if long is not None else 0,
            "status": self.status,
            "completionTime": completed_at.isoformat(),
        }

    def notify_completion(
        self,
        dispatch_id: str,
        lat: Optional[float] = None,
        long: Optional[float] = None,
        completed_at: Optional[datetime] = None,
    ) -> dict:
        """
        Post a completion event to the flow.

        Returns:
            The payload that was sent

        Raises:
            UpstreamTransportError: transport failure or non-success status
        """
        payload = self.build_payload(dispatch_id, lat, long, completed_at)
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Workflow request failed: {e}")
            raise UpstreamTransportError("workflow") from e

        if not response.ok:
            logger.error(
                f"Workflow returned {response.status_code}: {response.text[:500]}"
            )
            raise UpstreamTransportError("workflow", response.status_code)
        return payload
