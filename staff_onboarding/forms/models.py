"""Records stored in the ``staff_onboarding_submissions`` table.

The form sections and document references live in JSON columns, so the
models ignore unknown keys rather than failing on rows written by older
versions of the frontend.
"""

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .helpers import calculate_full_name

PeriodUnit = Literal["days", "weeks", "months"]


class OnboardingStep(StrEnum):
    """Which section the submission is waiting on."""

    EMPLOYER = "employer"
    EMPLOYEE = "employee"
    COMPLETE = "complete"


class OnboardingStatus(StrEnum):
    """Lifecycle status of a submission."""

    PENDING = "pending"
    EMPLOYER_COMPLETED = "employer_completed"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore")


class EmployerFormData(_Record):
    """Employment terms entered by the employer."""

    job_title: str = ""
    job_title_custom: str | None = None
    department: str = ""
    department_custom: str | None = None
    salary_currency: str = "AED"
    salary_total: float | None = None
    salary_basic: float | None = None
    salary_accommodation: float | None = None
    salary_transport: float | None = None
    salary_food: float | None = None
    salary_other: float | None = None
    annual_leave_days: int | None = 30
    annual_leave_type: Literal["calendar", "working"] = "calendar"
    notice_period_value: int | None = 1
    notice_period_unit: PeriodUnit = "months"
    probation_period_value: int | None = 6
    probation_period_unit: PeriodUnit = "months"
    weekly_off: Literal["sunday", "saturday_sunday"] = "saturday_sunday"
    starting_date: str = ""

    def effective_job_title(self) -> str:
        """The free-text title when "Other" was picked, else the dropdown value."""
        if self.job_title == "Other" and self.job_title_custom:
            return self.job_title_custom
        return self.job_title


class EmployeeFormData(_Record):
    """Personal details entered by the employee."""

    # Personal (from passport)
    title: str = ""
    first_name: str = ""
    middle_name: str | None = None
    last_name: str = ""
    full_name: str | None = None
    nationality: str = ""
    other_nationality: str | None = None
    additional_nationalities: list[str] | None = None
    previous_nationality: str | None = None
    date_of_birth: str | None = None
    passport_number: str | None = None
    passport_expiry: str | None = None
    place_of_issue: str | None = None
    gender: Literal["male", "female"] | None = None

    # Family
    father_full_name: str = ""
    mother_full_name: str = ""
    religion: str = ""
    marital_status: str = ""
    spouse_name: str | None = None

    # Home country contact; the split address fields are legacy
    home_address: str = ""
    home_telephone: str | None = None
    home_street_address: str | None = None
    home_postal_code: str | None = None
    home_city: str | None = None
    home_country: str | None = None

    # UAE contact
    uae_presence: Literal["inside", "outside"] = "inside"
    uae_flat_villa: str | None = None
    uae_building_name: str | None = None
    uae_street_name: str | None = None

    personal_email: str = ""
    company_email: str | None = None
    same_emails: bool = False
    mobile_uae: str = ""
    mobile_international: str | None = None

    educational_qualification: str = ""
    languages_spoken: list[str] = Field(default_factory=lambda: ["English"])

    has_uae_bank: bool = False
    bank_name: str | None = None
    bank_branch: str | None = None
    bank_swift: str | None = None
    bank_account_name: str | None = None
    bank_iban: str | None = None

    other_information: str | None = None

    @model_validator(mode="after")
    def _derive_fields(self) -> "EmployeeFormData":
        if self.first_name or self.last_name:
            self.full_name = calculate_full_name(
                self.first_name, self.middle_name, self.last_name
            )
        if self.same_emails:
            self.company_email = self.personal_email
        return self


class StoredFile(_Record):
    """Location of an uploaded object in the document bucket."""

    path: str
    filename: str


class PhotoReference(StoredFile):
    validated: bool = False
    validation_errors: list[str] | None = None


class PassportReference(StoredFile):
    """Single-image passport upload (legacy flow)."""

    extracted_data: dict[str, Any] | None = None


class PassportPageReference(StoredFile):
    validated: bool = False


class PassportPages(_Record):
    cover: PassportPageReference | None = None
    insidePages: PassportPageReference | None = None
    extracted_data: dict[str, Any] | None = None


class StaffDocumentReferences(_Record):
    """Pointers to everything uploaded for a submission."""

    photo: PhotoReference | None = None
    passport: PassportReference | None = None
    passportPages: PassportPages | None = None
    eid: StoredFile | None = None

    def to_column(self) -> dict[str, Any]:
        """JSON for the ``documents`` column, leaving out empty slots."""
        return self.model_dump(exclude_none=True)


class StaffOnboardingSubmission(_Record):
    """One employee's onboarding workflow row."""

    id: str
    tme_request_id: str | None = None
    client_code: str | None = None
    current_step: OnboardingStep = OnboardingStep.EMPLOYER
    is_same_person: bool = False

    # Pre-filled from TME Portal
    staff_name: str | None = None
    staff_email: str | None = None

    employer_data: EmployerFormData | None = None
    employer_signature_data: str | None = None
    employer_signed_at: str | None = None
    employer_signer_ip: str | None = None

    employee_data: EmployeeFormData | None = None
    employee_signature_data: str | None = None
    employee_signed_at: str | None = None
    employee_signer_ip: str | None = None

    documents: StaffDocumentReferences | None = None

    synced_to_tme: bool = False
    status: OnboardingStatus = OnboardingStatus.PENDING

    created_at: str | None = None
    updated_at: str | None = None
