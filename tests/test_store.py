"""Tests for the Supabase-backed submission store.

The Supabase client is a ``MagicMock``; its fluent query builder returns
itself so each chain can be inspected.
"""

from unittest.mock import MagicMock, patch

import pytest

from staff_onboarding.forms.models import (
    EmployeeFormData,
    EmployerFormData,
    PhotoReference,
    StaffDocumentReferences,
)
from staff_onboarding.storage.supabase_store import (
    OnboardingStore,
    StorageConfigError,
    get_client_ip,
    sanitize_filename,
)


def _make_client(row: dict | None = None) -> MagicMock:
    client = MagicMock()
    query = client.table.return_value
    for method in ("select", "update", "eq", "single"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=row)
    return client


def _update_payload(client: MagicMock) -> dict:
    return client.table.return_value.update.call_args.args[0]


class TestHelpers:
    """Tests for filename and IP helpers."""

    def test_sanitize_filename(self) -> None:
        assert sanitize_filename("my passport (1).jpg") == "my_passport__1_.jpg"
        assert sanitize_filename("scan-01.PDF") == "scan-01.PDF"

    def test_client_ip_forwarded(self) -> None:
        headers = {"x-forwarded-for": "203.0.113.5, 10.0.0.1", "x-real-ip": "10.0.0.2"}
        assert get_client_ip(headers) == "203.0.113.5"

    def test_client_ip_real_ip(self) -> None:
        assert get_client_ip({"x-real-ip": "10.0.0.2"}) == "10.0.0.2"

    def test_client_ip_unknown(self) -> None:
        assert get_client_ip({}) is None


class TestFromSettings:
    def test_missing_credentials(self) -> None:
        with pytest.raises(StorageConfigError):
            OnboardingStore.from_settings()

    def test_creates_client(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SUPABASE_URL", "https://db.example.co")
        monkeypatch.setenv("SUPABASE_KEY", "anon")
        with patch("staff_onboarding.storage.supabase_store.create_client") as mock_create:
            store = OnboardingStore.from_settings()
        mock_create.assert_called_once_with("https://db.example.co", "anon")
        assert store.client is mock_create.return_value


class TestGetSubmission:
    """Tests for reading rows."""

    def test_found(self) -> None:
        client = _make_client({"id": "abc", "current_step": "employee"})
        submission = OnboardingStore(client).get_submission("abc")
        assert submission is not None
        assert submission.id == "abc"
        client.table.assert_called_with("staff_onboarding_submissions")
        client.table.return_value.eq.assert_called_with("id", "abc")

    def test_missing_row(self) -> None:
        assert OnboardingStore(_make_client(None)).get_submission("abc") is None

    def test_error_returns_none(self) -> None:
        client = _make_client()
        client.table.return_value.execute.side_effect = RuntimeError("boom")
        assert OnboardingStore(client).get_submission("abc") is None


class TestUpdates:
    """Tests for the row patches."""

    def test_employer_data(self) -> None:
        client = _make_client()
        store = OnboardingStore(client)
        ok = store.update_employer_data("abc", EmployerFormData(job_title="Driver"), "sig", "1.2.3.4")

        assert ok is True
        payload = _update_payload(client)
        assert payload["employer_data"]["job_title"] == "Driver"
        assert payload["employer_signature_data"] == "sig"
        assert payload["employer_signer_ip"] == "1.2.3.4"
        assert payload["current_step"] == "employee"
        assert payload["status"] == "employer_completed"
        assert "employer_signed_at" in payload
        assert "updated_at" in payload

    def test_employee_data(self) -> None:
        client = _make_client()
        OnboardingStore(client).update_employee_data("abc", EmployeeFormData(), "sig")
        payload = _update_payload(client)
        assert payload["current_step"] == "complete"
        assert payload["status"] == "complete"
        assert payload["employee_signer_ip"] is None

    def test_same_person_shares_signature_and_time(self) -> None:
        client = _make_client()
        OnboardingStore(client).update_same_person_data(
            "abc", EmployerFormData(), EmployeeFormData(), "sig", "1.2.3.4"
        )
        payload = _update_payload(client)
        assert payload["employer_signature_data"] == payload["employee_signature_data"] == "sig"
        assert payload["employer_signed_at"] == payload["employee_signed_at"]
        assert payload["status"] == "complete"

    def test_document_references(self) -> None:
        client = _make_client()
        docs = StaffDocumentReferences(photo=PhotoReference(path="p", filename="f.jpg"))
        OnboardingStore(client).update_document_references("abc", docs)
        assert _update_payload(client)["documents"] == {
            "photo": {"path": "p", "filename": "f.jpg", "validated": False}
        }

    def test_failure_returns_false(self) -> None:
        client = _make_client()
        client.table.return_value.execute.side_effect = RuntimeError("boom")
        assert OnboardingStore(client).update_employee_data("abc", EmployeeFormData(), "s") is False


class TestUploads:
    """Tests for document uploads."""

    def test_upload_document_path(self) -> None:
        client = _make_client()
        bucket = client.storage.from_.return_value
        with patch("staff_onboarding.storage.supabase_store.time.time", return_value=1700000000.5):
            stored = OnboardingStore(client).upload_document(
                "abc", "photo", "my photo.jpg", b"data", "image/jpeg"
            )

        assert stored is not None
        assert stored.path == "abc/photo/1700000000500-my_photo.jpg"
        assert stored.filename == "my photo.jpg"
        client.storage.from_.assert_called_with("staff-documents")
        kwargs = bucket.upload.call_args.kwargs
        assert kwargs["file"] == b"data"
        assert kwargs["file_options"]["content-type"] == "image/jpeg"
        assert kwargs["file_options"]["upsert"] == "true"

    def test_upload_passport_page_path(self) -> None:
        client = _make_client()
        with patch("staff_onboarding.storage.supabase_store.time.time", return_value=1.5):
            stored = OnboardingStore(client).upload_passport_page(
                "abc", "insidePages", "open.png", b"x", "image/png"
            )
        assert stored.path == "abc/passport/insidePages/1500-open.png"

    def test_upload_failure(self) -> None:
        client = _make_client()
        client.storage.from_.return_value.upload.side_effect = RuntimeError("denied")
        assert OnboardingStore(client).upload_document("abc", "eid", "e.pdf", b"x") is None

    def test_public_url(self) -> None:
        client = _make_client()
        client.storage.from_.return_value.get_public_url.return_value = "https://cdn/x"
        assert OnboardingStore(client).get_document_url("abc/eid/x") == "https://cdn/x"
