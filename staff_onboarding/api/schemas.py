"""Pydantic request/response schemas for the FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from staff_onboarding.forms.models import EmployeeFormData, EmployerFormData


class ImageRequest(BaseModel):
    """Body of the vision endpoints.

    ``image`` is loosely typed so a missing or non-string value can be
    answered with the same friendly messages the upload widgets show.
    """

    image: Any = None
    expectedType: str | None = None


class PhotoValidationResponse(BaseModel):
    valid: bool
    errors: list[str]
    suggestions: list[str]
    confidence: float


class PassportPageResponse(BaseModel):
    page_type: str
    confidence: float
    details: str
    matches: bool
    errorMessage: str | None = None


class PassportExtractionResponse(BaseModel):
    success: bool
    data: dict[str, Any] = Field(default_factory=dict)
    confidence: dict[str, Any] = Field(default_factory=dict)
    mrz_verified: bool = False
    error: str | None = None


class NotifyEmployerRequest(BaseModel):
    supabaseId: str | None = None
    jobTitle: str | None = None


class ErrorResponse(BaseModel):
    """Error body for the non-vision endpoints."""

    error: str
    field_errors: dict[str, str] = Field(default_factory=dict)


class EmployerSubmitRequest(BaseModel):
    data: EmployerFormData
    signature: str | None = None


class EmployeeSubmitRequest(BaseModel):
    data: EmployeeFormData
    signature: str | None = None


class CombinedSubmitRequest(BaseModel):
    employer: EmployerFormData
    employee: EmployeeFormData
    signature: str | None = None


class SubmitResponse(BaseModel):
    success: bool = True
    submission_id: str
    step: str
    portal_notified: bool = False
    portal_error: str | None = None


class ProgressStepResponse(BaseModel):
    id: str
    label: str
    description: str
    status: str


class OnboardingViewResponse(BaseModel):
    """Everything the wizard needs to render for one submission."""

    state: str
    submission: dict[str, Any] | None = None
    progress: list[ProgressStepResponse] = Field(default_factory=list)
    document_urls: dict[str, str] = Field(default_factory=dict)
    dates: dict[str, dict[str, str]] = Field(default_factory=dict)


class UploadResponse(BaseModel):
    slot: str
    accepted: bool
    reference: dict[str, Any] | None = None
    messages: list[str] = Field(default_factory=list)
    check: dict[str, Any] | None = None
    prefill: dict[str, Any] = Field(default_factory=dict)


class SalaryBreakdownResponse(BaseModel):
    total: float
    basic: float
    accommodation: float
    transport: float
    food: float
    other: float
    explanation: str
    formatted: dict[str, str] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    vision_configured: bool
    storage_configured: bool
