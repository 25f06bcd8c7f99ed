"""Onboarding workflow: which form to show, and what each submit does.

A submission moves employer -> employee -> complete, or straight to
complete when the employer and employee are the same person. Document
uploads patch the ``documents`` column by re-reading the row first, so
a photo upload never drops a passport reference saved moments before.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from staff_onboarding.forms.models import (
    EmployeeFormData,
    EmployerFormData,
    OnboardingStatus,
    OnboardingStep,
    PassportPageReference,
    PassportPages,
    PassportReference,
    PhotoReference,
    StaffDocumentReferences,
    StaffOnboardingSubmission,
)
from staff_onboarding.imaging.compress import compress_image_for_ai, to_data_url
from staff_onboarding.portal.notifier import PortalError, PortalNotifier
from staff_onboarding.storage.supabase_store import OnboardingStore, PassportPageKey
from staff_onboarding.utils.config import VisionConfig
from staff_onboarding.utils.logger import get_logger
from staff_onboarding.validation.rules_engine import RulesEngine
from staff_onboarding.vision.passport_extraction import (
    PassportExtractionResult,
    extract_passport,
    to_employee_fields,
)
from staff_onboarding.vision.passport_page import (
    PassportPageType,
    PassportPageValidationResult,
    check_expected_page,
    validate_passport_page,
)
from staff_onboarding.vision.photo import PhotoValidationResult, validate_photo

logger = get_logger(__name__)

SAVE_FAILED = "Failed to save form. Please try again."
UPLOAD_FAILED = "Failed to upload file"

PAGE_SLOT_TYPES: dict[str, PassportPageType] = {
    "cover": PassportPageType.COVER,
    "insidePages": PassportPageType.INSIDE_PAGES,
}


class PageState(StrEnum):
    """Which screen a visitor to the onboarding link should see."""

    EMPLOYER = "employer"
    EMPLOYEE = "employee"
    COMBINED = "combined"
    NOT_FOUND = "not_found"
    CANCELLED = "cancelled"
    ALREADY_COMPLETE = "already_complete"


class WorkflowError(Exception):
    """A submit or upload was refused.

    Args:
        message: User-facing explanation.
        status_code: HTTP status the API should answer with.
        field_errors: Per-field messages, when the form failed validation.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        field_errors: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.field_errors = field_errors or {}


@dataclass
class SubmitOutcome:
    """Result of a successful form submit."""

    submission_id: str
    step: str
    portal_notified: bool = False
    portal_error: str | None = None


@dataclass
class UploadOutcome:
    """Result of a document upload and its AI check."""

    slot: str
    accepted: bool
    reference: dict[str, Any] | None = None
    messages: list[str] = field(default_factory=list)
    check: dict[str, Any] | None = None
    prefill: dict[str, Any] = field(default_factory=dict)


def resolve_page_state(submission: StaffOnboardingSubmission | None) -> PageState:
    """Decide which form a submission is waiting on."""
    if submission is None:
        return PageState.NOT_FOUND
    if submission.status == OnboardingStatus.CANCELLED:
        return PageState.CANCELLED
    if submission.status == OnboardingStatus.COMPLETE:
        return PageState.ALREADY_COMPLETE
    if submission.is_same_person:
        if submission.current_step == OnboardingStep.EMPLOYER:
            return PageState.COMBINED
        return PageState.ALREADY_COMPLETE
    if submission.current_step == OnboardingStep.EMPLOYEE:
        return PageState.EMPLOYEE
    if submission.current_step == OnboardingStep.EMPLOYER:
        return PageState.EMPLOYER
    return PageState.ALREADY_COMPLETE


_STATE_ERRORS: dict[PageState, tuple[str, int]] = {
    PageState.NOT_FOUND: ("Form not found", 404),
    PageState.CANCELLED: ("This onboarding request has been cancelled", 409),
    PageState.ALREADY_COMPLETE: ("This form has already been completed", 409),
}


class OnboardingService:
    """Runs the onboarding steps against the store.

    Args:
        store: Submission persistence.
        notifier: TME Portal client used after the employer signs.
        rules: Form rules engine.
        vision_config: Model and image settings for document checks.
    """

    def __init__(
        self,
        store: OnboardingStore,
        notifier: PortalNotifier,
        rules: RulesEngine,
        vision_config: VisionConfig | None = None,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.rules = rules
        self.vision_config = vision_config or VisionConfig()

    def resolve_view(
        self, submission_id: str
    ) -> tuple[PageState, StaffOnboardingSubmission | None]:
        submission = self.store.get_submission(submission_id)
        return resolve_page_state(submission), submission

    def _require_state(
        self, submission_id: str, *allowed: PageState
    ) -> StaffOnboardingSubmission:
        state, submission = self.resolve_view(submission_id)
        if state in allowed and submission is not None:
            return submission
        message, status = _STATE_ERRORS.get(
            state, ("This section is not open for this form", 409)
        )
        raise WorkflowError(message, status)

    def _check_form(self, data: dict[str, Any], form: str, prefix: str = "") -> dict[str, str]:
        report = self.rules.validate(data, form)
        return {f"{prefix}{name}": message for name, message in report.errors.items()}

    @staticmethod
    def _require_signature(signature: str | None, errors: dict[str, str]) -> None:
        if not signature or not signature.strip():
            errors["signature"] = "Please sign the form"

    @staticmethod
    def _require_photo(submission: StaffOnboardingSubmission, errors: dict[str, str]) -> None:
        if submission.documents is None or submission.documents.photo is None:
            errors["photo"] = "Please upload your photo"

    @staticmethod
    def _raise_if_invalid(errors: dict[str, str]) -> None:
        if errors:
            first = next(iter(errors.values()))
            raise WorkflowError(first, 422, errors)

    def submit_employer(
        self,
        submission_id: str,
        data: EmployerFormData,
        signature: str | None,
        ip: str | None = None,
    ) -> SubmitOutcome:
        """Save the employer section and notify the portal.

        A portal failure is reported in the outcome but does not undo the
        save; the portal can resend the invitation later.
        """
        self._require_state(submission_id, PageState.EMPLOYER)

        errors = self._check_form(data.model_dump(), "employer")
        self._require_signature(signature, errors)
        self._raise_if_invalid(errors)

        if not self.store.update_employer_data(submission_id, data, signature, ip):
            raise WorkflowError(SAVE_FAILED, 502)

        outcome = SubmitOutcome(submission_id, OnboardingStep.EMPLOYEE.value)
        try:
            self.notifier.notify_employer_complete(
                submission_id, data.effective_job_title()
            )
            outcome.portal_notified = True
        except PortalError as exc:
            logger.warning(
                "Employer data saved for %s but portal notification failed: %s",
                submission_id,
                exc.message,
            )
            outcome.portal_error = exc.message
        return outcome

    def submit_employee(
        self,
        submission_id: str,
        data: EmployeeFormData,
        signature: str | None,
        ip: str | None = None,
    ) -> SubmitOutcome:
        """Save the employee section; requires an uploaded photo."""
        submission = self._require_state(submission_id, PageState.EMPLOYEE)

        errors: dict[str, str] = {}
        self._require_photo(submission, errors)
        errors.update(self._check_form(data.model_dump(), "employee"))
        self._require_signature(signature, errors)
        self._raise_if_invalid(errors)

        if not self.store.update_employee_data(submission_id, data, signature, ip):
            raise WorkflowError(SAVE_FAILED, 502)
        return SubmitOutcome(submission_id, OnboardingStep.COMPLETE.value)

    def submit_combined(
        self,
        submission_id: str,
        employer: EmployerFormData,
        employee: EmployeeFormData,
        signature: str | None,
        ip: str | None = None,
    ) -> SubmitOutcome:
        """Save both sections for a same-person submission under one signature."""
        submission = self._require_state(submission_id, PageState.COMBINED)

        errors: dict[str, str] = {}
        self._require_photo(submission, errors)
        errors.update(self._check_form(employer.model_dump(), "employer", "employer."))
        errors.update(self._check_form(employee.model_dump(), "employee", "employee."))
        self._require_signature(signature, errors)
        self._raise_if_invalid(errors)

        if not self.store.update_same_person_data(
            submission_id, employer, employee, signature, ip
        ):
            raise WorkflowError(SAVE_FAILED, 502)
        return SubmitOutcome(submission_id, OnboardingStep.COMPLETE.value)

    def _update_documents(
        self, submission_id: str, mutate: Callable[[StaffDocumentReferences], None]
    ) -> StaffDocumentReferences:
        """Re-read the row, apply ``mutate`` to its documents, and save."""
        submission = self.store.get_submission(submission_id)
        if submission is None:
            raise WorkflowError("Form not found", 404)

        documents = submission.documents or StaffDocumentReferences()
        mutate(documents)
        if not self.store.update_document_references(submission_id, documents):
            raise WorkflowError(SAVE_FAILED, 502)
        return documents

    def _prepare_for_ai(self, content: bytes) -> str:
        return compress_image_for_ai(
            content,
            max_dimension=self.vision_config.max_image_dimension,
            quality=self.vision_config.jpeg_quality,
        )

    def attach_photo(
        self, submission_id: str, filename: str, content: bytes, content_type: str
    ) -> UploadOutcome:
        """Store the visa photo, then record the AI verdict on it."""
        self._require_state(submission_id, PageState.EMPLOYEE, PageState.COMBINED)
        prepared = self._prepare_for_ai(content)

        stored = self.store.upload_document(
            submission_id, "photo", filename, content, content_type
        )
        if stored is None:
            raise WorkflowError(UPLOAD_FAILED, 502)

        reference = PhotoReference(path=stored.path, filename=stored.filename)
        self._update_documents(submission_id, lambda docs: setattr(docs, "photo", reference))

        result = validate_photo(prepared, self.vision_config)
        return self.record_photo_validation(submission_id, reference, result)

    def record_photo_validation(
        self,
        submission_id: str,
        reference: PhotoReference,
        result: PhotoValidationResult,
    ) -> UploadOutcome:
        """Save a photo check result onto the stored photo reference."""
        messages = [] if result.valid else result.messages()
        validated = reference.model_copy(
            update={"validated": result.valid, "validation_errors": messages}
        )

        def apply(docs: StaffDocumentReferences) -> None:
            # the photo may have been replaced or removed meanwhile
            if docs.photo is not None and docs.photo.path == reference.path:
                docs.photo = validated

        self._update_documents(submission_id, apply)
        return UploadOutcome(
            slot="photo",
            accepted=True,
            reference=validated.model_dump(),
            messages=messages,
            check=result.to_dict(),
        )

    def attach_passport(
        self, submission_id: str, filename: str, content: bytes, content_type: str
    ) -> UploadOutcome:
        """Store a single passport scan and pre-fill fields from it."""
        self._require_state(submission_id, PageState.EMPLOYEE, PageState.COMBINED)
        if content_type == "application/pdf":
            # extraction refuses PDFs; the scan is still stored for manual review
            prepared = to_data_url(content, content_type)
        else:
            prepared = self._prepare_for_ai(content)

        stored = self.store.upload_document(
            submission_id, "passport", filename, content, content_type
        )
        if stored is None:
            raise WorkflowError(UPLOAD_FAILED, 502)

        extraction = extract_passport(prepared, self.vision_config)

        reference = PassportReference(
            path=stored.path,
            filename=stored.filename,
            extracted_data=extraction.data or None,
        )
        self._update_documents(
            submission_id, lambda docs: setattr(docs, "passport", reference)
        )
        return UploadOutcome(
            slot="passport",
            accepted=True,
            reference=reference.model_dump(),
            messages=[] if extraction.success else [extraction.error or UPLOAD_FAILED],
            check=extraction.to_dict(),
            prefill=to_employee_fields(extraction),
        )

    def attach_passport_page(
        self,
        submission_id: str,
        page_key: PassportPageKey,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> UploadOutcome:
        """Check a passport page is the expected one, then store it.

        Pages that do not match their slot are not uploaded. Once the
        inside pages are accepted they are also run through extraction.
        """
        self._require_state(submission_id, PageState.EMPLOYEE, PageState.COMBINED)

        expected = PAGE_SLOT_TYPES[page_key]
        prepared = self._prepare_for_ai(content)
        classification = validate_passport_page(prepared, self.vision_config)
        matches, error = check_expected_page(classification, expected)
        if not matches:
            return UploadOutcome(
                slot=page_key,
                accepted=False,
                messages=[error or "This is not the correct page type"],
                check=_page_check(classification, matches, error),
            )

        stored = self.store.upload_passport_page(
            submission_id, page_key, filename, content, content_type
        )
        if stored is None:
            raise WorkflowError(UPLOAD_FAILED, 502)

        reference = PassportPageReference(
            path=stored.path, filename=stored.filename, validated=True
        )
        extraction: PassportExtractionResult | None = None
        if page_key == "insidePages":
            extraction = extract_passport(prepared, self.vision_config)

        def apply(docs: StaffDocumentReferences) -> None:
            pages = docs.passportPages or PassportPages()
            setattr(pages, page_key, reference)
            if extraction is not None and extraction.success:
                pages.extracted_data = extraction.data
            docs.passportPages = pages

        self._update_documents(submission_id, apply)
        return UploadOutcome(
            slot=page_key,
            accepted=True,
            reference=reference.model_dump(),
            check=_page_check(classification, matches, error),
            prefill=to_employee_fields(extraction) if extraction else {},
        )

    def attach_eid(
        self, submission_id: str, filename: str, content: bytes, content_type: str
    ) -> UploadOutcome:
        self._require_state(submission_id, PageState.EMPLOYEE, PageState.COMBINED)

        stored = self.store.upload_document(
            submission_id, "eid", filename, content, content_type
        )
        if stored is None:
            raise WorkflowError(UPLOAD_FAILED, 502)

        self._update_documents(submission_id, lambda docs: setattr(docs, "eid", stored))
        return UploadOutcome(slot="eid", accepted=True, reference=stored.model_dump())

    def remove_document(self, submission_id: str, slot: str) -> StaffDocumentReferences:
        """Forget an uploaded document; the stored object itself is kept."""
        self._require_state(submission_id, PageState.EMPLOYEE, PageState.COMBINED)

        def apply(docs: StaffDocumentReferences) -> None:
            if slot in PAGE_SLOT_TYPES:
                if docs.passportPages is not None:
                    setattr(docs.passportPages, slot, None)
            else:
                setattr(docs, slot, None)

        return self._update_documents(submission_id, apply)


def _page_check(
    classification: PassportPageValidationResult, matches: bool, error: str | None
) -> dict[str, Any]:
    check = classification.to_dict()
    check["matches"] = matches
    check["errorMessage"] = error
    return check
