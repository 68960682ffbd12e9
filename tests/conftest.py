"""
Shared pytest fixtures and configuration.
"""

import base64
import json

import pytest

from src.config.settings import Settings
from tests.helpers import FakeCredential

# Well-known development storage (Azurite) account key, safe to publish
DEV_ACCOUNT_KEY = (
    "Eby8vdM02xNOcqFlqUwJPLlmEtlCDXJ1OUzFT50uSRZ6IFsuFq2UVErCz4I6tq/K1SZFPTOtr/KBHBeksoGMGw=="
)


@pytest.fixture
def dev_connection_string():
    return (
        "DefaultEndpointsProtocol=https;AccountName=portalfiles;"
        f"AccountKey={DEV_ACCOUNT_KEY};EndpointSuffix=core.windows.net"
    )


@pytest.fixture
def settings(dev_connection_string):
    return Settings(
        tenant_id="tenant-id",
        client_id="client-id",
        client_secret="client-secret",
        dataverse_url="https://contoso.crm7.dynamics.com",
        flow_url_complete="https://flow.example.com/trigger",
        storage_connection_string=dev_connection_string,
        attachment_container="attachments",
    )


@pytest.fixture
def credential():
    return FakeCredential()


@pytest.fixture
def make_principal_header():
    """Build an x-ms-client-principal header value."""

    def _make(user_details: str = "alice@company.com", claims=None, **extra) -> str:
        principal = {
            "identityProvider": "aad",
            "userId": "b1f2c3",
            "userDetails": user_details,
            "userRoles": ["anonymous", "authenticated"],
            **extra,
        }
        if claims is not None:
            principal["claims"] = claims
        return base64.b64encode(json.dumps(principal).encode("utf-8")).decode("ascii")

    return _make


@pytest.fixture
def worker_row():
    return {
        "new_sagyouin_id": "山田 太郎",
        "_owningbusinessunit_value": "3f2504e0-4f89-11d3-9a0c-0305e82c3301",
    }
