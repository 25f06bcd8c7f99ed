"""Supabase-backed persistence for onboarding submissions.

Rows live in one table and uploads in one bucket; both are owned by the
hosted project. Failures are logged and reported as ``None`` / ``False``
so callers can show a retry message instead of a stack trace.
"""

import re
import time
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Literal

from supabase import Client, create_client

from staff_onboarding.forms.models import (
    EmployeeFormData,
    EmployerFormData,
    OnboardingStatus,
    OnboardingStep,
    StaffDocumentReferences,
    StaffOnboardingSubmission,
    StoredFile,
)
from staff_onboarding.utils.config import StorageConfig, load_secrets
from staff_onboarding.utils.logger import get_logger

logger = get_logger(__name__)

DocumentType = Literal["photo", "passport", "eid"]
PassportPageKey = Literal["cover", "insidePages"]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


class StorageConfigError(RuntimeError):
    """Raised when Supabase credentials are missing."""


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_client_ip(headers: Mapping[str, str]) -> str | None:
    """Best guess at the signer's IP from proxy headers."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return None


class OnboardingStore:
    """Reads and patches onboarding rows and stores their documents.

    Args:
        client: Supabase client.
        config: Table, bucket and upload settings.
    """

    def __init__(self, client: Client, config: StorageConfig | None = None) -> None:
        self.client = client
        self.config = config or StorageConfig()

    @classmethod
    def from_settings(cls, config: StorageConfig | None = None) -> "OnboardingStore":
        """Build a store from ``SUPABASE_URL`` / ``SUPABASE_KEY``.

        Raises:
            StorageConfigError: If either variable is missing.
        """
        secrets = load_secrets()
        if not secrets.supabase_url or not secrets.supabase_key:
            raise StorageConfigError("SUPABASE_URL and SUPABASE_KEY must be set")
        return cls(create_client(secrets.supabase_url, secrets.supabase_key), config)

    def _table(self):
        return self.client.table(self.config.table)

    def _bucket(self):
        return self.client.storage.from_(self.config.bucket)

    def _patch(self, submission_id: str, values: dict[str, Any], action: str) -> bool:
        values["updated_at"] = _now_iso()
        try:
            self._table().update(values).eq("id", submission_id).execute()
        except Exception as exc:
            logger.error("Error %s for %s: %s", action, submission_id, exc)
            return False
        logger.info("Saved %s for submission %s", action, submission_id)
        return True

    def get_submission(self, submission_id: str) -> StaffOnboardingSubmission | None:
        """Fetch one submission, or ``None`` if it is missing or unreadable."""
        try:
            response = (
                self._table().select("*").eq("id", submission_id).single().execute()
            )
        except Exception as exc:
            logger.error("Error fetching staff onboarding %s: %s", submission_id, exc)
            return None

        if not response.data:
            return None
        return StaffOnboardingSubmission.model_validate(response.data)

    def update_employer_data(
        self,
        submission_id: str,
        data: EmployerFormData,
        signature: str,
        ip: str | None = None,
    ) -> bool:
        """Store the employer section and hand the row over to the employee."""
        return self._patch(
            submission_id,
            {
                "employer_data": data.model_dump(),
                "employer_signature_data": signature,
                "employer_signed_at": _now_iso(),
                "employer_signer_ip": ip,
                "current_step": OnboardingStep.EMPLOYEE.value,
                "status": OnboardingStatus.EMPLOYER_COMPLETED.value,
            },
            "employer data",
        )

    def update_employee_data(
        self,
        submission_id: str,
        data: EmployeeFormData,
        signature: str,
        ip: str | None = None,
    ) -> bool:
        """Store the employee section and mark the submission complete."""
        return self._patch(
            submission_id,
            {
                "employee_data": data.model_dump(),
                "employee_signature_data": signature,
                "employee_signed_at": _now_iso(),
                "employee_signer_ip": ip,
                "current_step": OnboardingStep.COMPLETE.value,
                "status": OnboardingStatus.COMPLETE.value,
            },
            "employee data",
        )

    def update_same_person_data(
        self,
        submission_id: str,
        employer_data: EmployerFormData,
        employee_data: EmployeeFormData,
        signature: str,
        ip: str | None = None,
    ) -> bool:
        """Store both sections at once; one signature and timestamp cover both."""
        now = _now_iso()
        return self._patch(
            submission_id,
            {
                "employer_data": employer_data.model_dump(),
                "employer_signature_data": signature,
                "employer_signed_at": now,
                "employer_signer_ip": ip,
                "employee_data": employee_data.model_dump(),
                "employee_signature_data": signature,
                "employee_signed_at": now,
                "employee_signer_ip": ip,
                "current_step": OnboardingStep.COMPLETE.value,
                "status": OnboardingStatus.COMPLETE.value,
            },
            "same-person data",
        )

    def update_document_references(
        self, submission_id: str, documents: StaffDocumentReferences
    ) -> bool:
        return self._patch(
            submission_id, {"documents": documents.to_column()}, "document references"
        )

    def _upload(
        self, path: str, filename: str, content: bytes, content_type: str
    ) -> StoredFile | None:
        try:
            self._bucket().upload(
                path=path,
                file=content,
                file_options={
                    "cache-control": self.config.cache_control,
                    "content-type": content_type,
                    "upsert": "true",
                },
            )
        except Exception as exc:
            logger.error("Error uploading %s: %s", path, exc)
            return None
        logger.info("Uploaded %s (%d bytes)", path, len(content))
        return StoredFile(path=path, filename=filename)

    def upload_document(
        self,
        submission_id: str,
        doc_type: DocumentType,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> StoredFile | None:
        """Upload a photo, passport or Emirates ID file.

        Stored at ``<id>/<type>/<epoch-ms>-<sanitised name>``; the original
        filename is kept in the returned reference.
        """
        path = (
            f"{submission_id}/{doc_type}/"
            f"{int(time.time() * 1000)}-{sanitize_filename(filename)}"
        )
        return self._upload(path, filename, content, content_type)

    def upload_passport_page(
        self,
        submission_id: str,
        page_key: PassportPageKey,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> StoredFile | None:
        """Upload one page of the multi-page passport flow."""
        path = (
            f"{submission_id}/passport/{page_key}/"
            f"{int(time.time() * 1000)}-{sanitize_filename(filename)}"
        )
        return self._upload(path, filename, content, content_type)

    def get_document_url(self, path: str) -> str:
        return self._bucket().get_public_url(path)
