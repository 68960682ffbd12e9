"""
Test doubles for the HTTP session and Azure credential.
"""

import json
from collections import namedtuple
from typing import Any, Dict, List, Optional

AccessToken = namedtuple("AccessToken", ["token", "expires_on"])


class FakeCredential:
    """Stands in for ClientSecretCredential."""

    def __init__(self, token: str = "fake-token"):
        self.token = token
        self.scopes: List[str] = []

    def get_token(self, *scopes: str):
        self.scopes.extend(scopes)
        return AccessToken(self.token, 0)


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: str = ""):
        self.status_code = status_code
        self._body = body
        self.text = text or (json.dumps(body) if body is not None else "")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeSession:
    """Records requests and replays queued responses in order."""

    def __init__(self, responses: Optional[List[FakeResponse]] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def _next(self, method: str, url: str, **kwargs) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url: str, **kwargs) -> FakeResponse:
        return self._next("GET", url, **kwargs)

    def post(self, url: str, **kwargs) -> FakeResponse:
        return self._next("POST", url, **kwargs)


__all__ = [
    "AccessToken",
    "FakeCredential",
    "FakeResponse",
    "FakeSession",
]
