"""
Tests for the worker directory, dispatch listing and workflow trigger.
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from src.dataverse.client import DataverseClient
from src.errors import DirectoryLookupError, UpstreamTransportError
from src.identity.normalizer import CanonicalEmail, IdentitySource
from src.services.directory import WorkerDirectory, WorkerRecord
from src.services.dispatch import DispatchService
from src.services.workflow import WorkflowTrigger
from src.storage.sas import SignedUrlIssuer, SignedUrlResult

from tests.helpers import FakeResponse, FakeSession

BU_ID = uuid.UUID("3f2504e0-4f89-11d3-9a0c-0305e82c3301")


@pytest.fixture
def email():
    return CanonicalEmail(
        value="jdoe@example.com",
        source=IdentitySource.DISPLAY,
        guest_heuristic=True,
        raw_value="jdoe_example.com#EXT#@tenant.onmicrosoft.com",
    )


@pytest.fixture
def worker():
    return WorkerRecord(name="山田 太郎", email="jdoe@example.com", business_unit_id=BU_ID)


def make_client(settings, credential, *responses):
    session = FakeSession(list(responses))
    return DataverseClient(settings, credential=credential, session=session), session


class TestWorkerDirectory:
    def test_find(self, settings, credential, email, worker_row):
        client, session = make_client(
            settings, credential, FakeResponse(200, {"value": [worker_row]})
        )

        record = WorkerDirectory(client).find(email)

        assert record == WorkerRecord("山田 太郎", "jdoe@example.com", BU_ID)
        assert "new_mail%20eq%20'jdoe%40example.com'" in session.calls[0]["url"]

    def test_not_registered(self, settings, credential, email):
        client, _ = make_client(settings, credential, FakeResponse(200, {"value": []}))

        with pytest.raises(DirectoryLookupError):
            WorkerDirectory(client).find(email)

    def test_missing_business_unit(self, settings, credential, email):
        client, _ = make_client(
            settings,
            credential,
            FakeResponse(200, {"value": [{"new_sagyouin_id": "A", "_owningbusinessunit_value": None}]}),
        )

        with pytest.raises(DirectoryLookupError):
            WorkerDirectory(client).find(email)


class TestDispatchService:
    def test_lists_by_business_unit_newest_first(self, settings, credential, worker):
        rows = [{"new_day": "2026-04-02", "new_genbamei": "本社"}]
        client, session = make_client(settings, credential, FakeResponse(200, {"value": rows}))

        records = DispatchService(client).list_for(worker)

        assert records == rows
        url = session.calls[0]["url"]
        assert url.split("?")[0].endswith("/new_table2s")
        assert f"_owningbusinessunit_value%20eq%20{BU_ID}" in url
        assert "$orderby=new_day%20desc" in url
        assert "new_attachment_path" in url

    def test_attachment_links(self, settings, credential, worker, dev_connection_string):
        rows = [
            {"new_day": "2026-04-02", "new_attachment_path": "/attachments/a/plan.pdf"},
            {"new_day": "2026-04-01", "new_attachment_path": None},
        ]
        client, _ = make_client(settings, credential, FakeResponse(200, {"value": rows}))
        issuer = SignedUrlIssuer(dev_connection_string)

        records = DispatchService(client, issuer).list_for(worker)

        assert records[0]["attachmentUrl"].startswith(
            "https://portalfiles.blob.core.windows.net/attachments/a/plan.pdf?"
        )
        assert "attachmentUrlExpiresAt" in records[0]
        assert "attachmentUrl" not in records[1]

    def test_signing_failure_omits_link(self, settings, credential, worker):
        rows = [{"new_day": "2026-04-02", "new_attachment_path": "plan.pdf"}]
        client, _ = make_client(settings, credential, FakeResponse(200, {"value": rows}))
        issuer = SignedUrlIssuer("AccountName=portalfiles")

        records = DispatchService(client, issuer).list_for(worker)

        assert records == rows

    def test_non_string_attachment_path_omits_link(
        self, settings, credential, worker, dev_connection_string
    ):
        rows = [{"new_day": "2026-04-02", "new_attachment_path": 12345}]
        client, _ = make_client(settings, credential, FakeResponse(200, {"value": rows}))
        issuer = SignedUrlIssuer(dev_connection_string)

        records = DispatchService(client, issuer).list_for(worker)

        assert "attachmentUrl" not in records[0]
        assert records == rows

    def test_custom_attachment_field(self, settings, credential, worker):
        rows = [{"cr_file": "x.pdf"}]
        client, _ = make_client(settings, credential, FakeResponse(200, {"value": rows}))
        issuer = MagicMock(spec=SignedUrlIssuer)
        issuer.issue.return_value = SignedUrlResult(
            url="https://acct/docs/x.pdf?sig=1",
            issued_at=datetime(2026, 4, 1, tzinfo=timezone.utc),
            expires_at=datetime(2026, 4, 1, 1, tzinfo=timezone.utc),
        )

        records = DispatchService(
            client, issuer, container="docs", attachment_field="cr_file"
        ).list_for(worker)

        issuer.issue.assert_called_once_with("docs", "x.pdf")
        assert records[0]["attachmentUrl"] == "https://acct/docs/x.pdf?sig=1"
        assert records[0]["attachmentUrlExpiresAt"] == "2026-04-01T01:00:00+00:00"


class TestWorkflowTrigger:
    def test_payload(self, settings):
        session = FakeSession([FakeResponse(202)])
        completed_at = datetime(2026, 4, 1, 17, 0, tzinfo=timezone.utc)

        payload = WorkflowTrigger(settings, session=session).notify_completion(
            "H-001", 35.68, 139.76, completed_at
        )

        assert payload == {
            "id": "H-001",
            "lat": 35.68,
            "long": 139.76,
            "status": 100000004,
            "completionTime": "2026-04-01T17:00:00+00:00",
        }
        assert session.calls[0]["url"] == "https://flow.example.com/trigger"
        assert session.calls[0]["json"] == payload

    def test_missing_coordinates_are_zero(self, settings):
        session = FakeSession([FakeResponse(200)])

        payload = WorkflowTrigger(settings, session=session).notify_completion("H-002")

        assert payload["lat"] == 0
        assert payload["long"] == 0
        assert payload["completionTime"].endswith("+00:00")

    def test_flow_failure(self, settings):
        session = FakeSession([FakeResponse(500, text="flow exploded")])

        with pytest.raises(UpstreamTransportError) as exc_info:
            WorkflowTrigger(settings, session=session).notify_completion("H-003")

        assert exc_info.value.service == "workflow"
        assert exc_info.value.status == 500
