"""FastAPI application for the staff onboarding service.

Serves the AI document checks used by the upload widgets, the employer
completion callback, and the onboarding wizard's read/submit/upload
endpoints.
"""

from pathlib import Path
from typing import Annotated, Any

from fastapi import FastAPI, File, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from staff_onboarding.forms.constants import (
    DEFAULT_SALARY_BREAKDOWN,
    SALARY_BREAKDOWN_EXPLANATION,
    all_option_tables,
)
from staff_onboarding.forms.helpers import (
    calculate_salary_breakdown,
    format_currency,
    format_date_display,
    format_date_for_input,
    time_period_options,
)
from staff_onboarding.forms.progress import progress_as_dicts
from staff_onboarding.imaging.compress import ImagePayloadError, compress_image_for_ai
from staff_onboarding.onboarding.workflow import (
    OnboardingService,
    PageState,
    UploadOutcome,
    WorkflowError,
)
from staff_onboarding.portal.notifier import PortalError, PortalNotifier
from staff_onboarding.storage.supabase_store import (
    OnboardingStore,
    StorageConfigError,
    get_client_ip,
)
from staff_onboarding.utils.config import AppConfig, load_config, load_secrets
from staff_onboarding.utils.logger import get_logger
from staff_onboarding.validation.rules_engine import RulesEngine
from staff_onboarding.vision.client import is_vision_configured
from staff_onboarding.vision.passport_extraction import extract_passport
from staff_onboarding.vision.passport_page import (
    PassportPageType,
    check_expected_page,
    validate_passport_page,
)
from staff_onboarding.vision.photo import validate_photo

from .schemas import (
    CombinedSubmitRequest,
    EmployeeSubmitRequest,
    EmployerSubmitRequest,
    ErrorResponse,
    HealthResponse,
    ImageRequest,
    NotifyEmployerRequest,
    OnboardingViewResponse,
    PassportExtractionResponse,
    PassportPageResponse,
    PhotoValidationResponse,
    SalaryBreakdownResponse,
    SubmitResponse,
    UploadResponse,
)

logger = get_logger(__name__)

VERSION = "1.0.0"

app = FastAPI(
    title="Staff Onboarding API",
    description="Employer and employee onboarding with AI document checks",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_IMAGE_SLOTS = {"photo", "cover", "insidePages"}
_PDF_ALLOWED_SLOTS = {"passport", "eid"}
_DOCUMENT_SLOTS = _IMAGE_SLOTS | _PDF_ALLOWED_SLOTS
_PRIVATE_FIELDS = {
    "employer_signature_data",
    "employee_signature_data",
    "employer_signer_ip",
    "employee_signer_ip",
}
_TIMESTAMP_FIELDS = ("created_at", "employer_signed_at", "employee_signed_at", "updated_at")
_ONBOARDING_ERRORS: dict[int | str, dict[str, Any]] = {
    status: {"model": ErrorResponse} for status in (400, 404, 422, 502, 503)
}


def _get_config() -> AppConfig:
    return load_config()


def _get_service() -> OnboardingService:
    """Build the workflow service from configuration.

    Returns:
        Service wired to Supabase, the TME Portal and the form rules.
    """
    config = _get_config()
    return OnboardingService(
        store=OnboardingStore.from_settings(config.storage),
        notifier=PortalNotifier(config.portal),
        rules=RulesEngine(Path(config.validation.rules_path)),
        vision_config=config.vision,
    )


def _get_notifier() -> PortalNotifier:
    return PortalNotifier(_get_config().portal)


def _prepare_image(image: str, max_dimension: int, quality: int) -> str:
    """Downscale an image for the model; PDFs and undecodable input pass through."""
    if image.startswith("data:application/pdf"):
        return image
    try:
        return compress_image_for_ai(image, max_dimension=max_dimension, quality=quality)
    except ImagePayloadError as exc:
        logger.warning("Could not compress image before analysis: %s", exc)
        return image


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message, field_errors=exc.field_errors).model_dump(),
    )


@app.exception_handler(StorageConfigError)
async def storage_config_error_handler(
    request: Request, exc: StorageConfigError
) -> JSONResponse:
    logger.error("Storage not configured: %s", exc)
    return JSONResponse(
        status_code=503, content={"error": "Onboarding storage unavailable"}
    )


@app.exception_handler(ImagePayloadError)
async def image_payload_error_handler(
    request: Request, exc: ImagePayloadError
) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Please select an image file"})


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    secrets = load_secrets()
    return HealthResponse(
        status="healthy",
        version=VERSION,
        vision_configured=bool(secrets.anthropic_api_key),
        storage_configured=bool(secrets.supabase_url and secrets.supabase_key),
    )


def _photo_body(errors: list[str], suggestions: list[str]) -> dict[str, Any]:
    return {"valid": False, "errors": errors, "suggestions": suggestions, "confidence": 0}


@app.post("/api/validate-photo", response_model=PhotoValidationResponse)
def validate_photo_endpoint(body: ImageRequest) -> Any:
    """Check a base64 visa photo against the UAE photo rules."""
    try:
        if not body.image:
            return JSONResponse(
                status_code=400,
                content=_photo_body(["No image provided"], ["Please upload an image"]),
            )
        if not isinstance(body.image, str):
            return JSONResponse(
                status_code=400,
                content=_photo_body(
                    ["Invalid image format"], ["Please provide a base64 encoded image"]
                ),
            )
        if not is_vision_configured():
            logger.error("ANTHROPIC_API_KEY not configured")
            return JSONResponse(
                status_code=503,
                content=_photo_body(
                    ["Photo validation service unavailable"], ["Please try again later"]
                ),
            )

        config = _get_config().vision
        image = _prepare_image(body.image, config.max_image_dimension, config.jpeg_quality)
        return validate_photo(image, config).to_dict()
    except Exception as exc:
        logger.error("Photo validation API error: %s", exc)
        return JSONResponse(
            status_code=500,
            content=_photo_body(["An error occurred during validation"], ["Please try again"]),
        )


@app.post("/api/validate-passport-page", response_model=PassportPageResponse)
def validate_passport_page_endpoint(body: ImageRequest) -> Any:
    """Classify a passport image and compare it with the expected page."""
    try:
        if not body.image or not isinstance(body.image, str):
            return JSONResponse(status_code=400, content={"error": "Image is required"})

        expected = None
        if body.expectedType:
            try:
                expected = PassportPageType(body.expectedType)
            except ValueError:
                return JSONResponse(
                    status_code=400, content={"error": "Invalid expected page type"}
                )

        config = _get_config().vision
        image = _prepare_image(body.image, config.max_image_dimension, config.jpeg_quality)
        result = validate_passport_page(image, config)
        matches, error_message = check_expected_page(result, expected)
        return {**result.to_dict(), "matches": matches, "errorMessage": error_message}
    except Exception as exc:
        logger.error("Passport page validation error: %s", exc)
        return JSONResponse(
            status_code=500, content={"error": "Failed to validate passport page"}
        )


def _extraction_body(error: str) -> dict[str, Any]:
    return {
        "success": False,
        "data": {},
        "confidence": {},
        "mrz_verified": False,
        "error": error,
    }


@app.post("/api/extract-passport", response_model=PassportExtractionResponse)
def extract_passport_endpoint(body: ImageRequest) -> Any:
    """Read name, passport number and dates from a passport image."""
    try:
        if not body.image:
            return JSONResponse(status_code=400, content=_extraction_body("No image provided"))
        if not isinstance(body.image, str):
            return JSONResponse(
                status_code=400, content=_extraction_body("Invalid image format")
            )
        if not is_vision_configured():
            logger.error("ANTHROPIC_API_KEY not configured")
            return JSONResponse(
                status_code=503,
                content=_extraction_body("Passport extraction service unavailable"),
            )

        config = _get_config().vision
        image = _prepare_image(body.image, config.max_image_dimension, config.jpeg_quality)
        return extract_passport(image, config).to_dict()
    except Exception as exc:
        logger.error("Passport extraction API error: %s", exc)
        return JSONResponse(
            status_code=500,
            content=_extraction_body("An error occurred during extraction"),
        )


@app.post("/api/notify-employer-complete")
def notify_employer_complete(body: NotifyEmployerRequest) -> Any:
    """Forward the employer-complete event to the TME Portal."""
    if not body.supabaseId:
        return JSONResponse(status_code=400, content={"error": "Supabase ID is required"})

    try:
        return _get_notifier().notify_employer_complete(body.supabaseId, body.jobTitle)
    except PortalError as exc:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
    except Exception as exc:
        logger.error("notify-employer-complete failed: %s", exc)
        return JSONResponse(
            status_code=500, content={"error": "Failed to notify employer completion"}
        )


@app.get("/api/constants")
async def list_constants(
    period: Annotated[float | None, Query(ge=0)] = None,
) -> dict[str, Any]:
    """Option tables for the form dropdowns.

    ``period`` is the number typed next to a time unit picker; the unit
    labels come back singular or plural to agree with it.
    """
    return {
        **all_option_tables(),
        "time_period_options": time_period_options(period),
        "default_salary_breakdown": DEFAULT_SALARY_BREAKDOWN,
        "salary_breakdown_explanation": SALARY_BREAKDOWN_EXPLANATION,
    }


@app.get("/api/salary-breakdown", response_model=SalaryBreakdownResponse)
async def salary_breakdown(
    total: Annotated[float, Query(ge=0)],
    currency: str = "AED",
) -> SalaryBreakdownResponse:
    """Suggested split of a monthly salary using the default percentages."""
    parts = calculate_salary_breakdown(total)
    return SalaryBreakdownResponse(
        total=total,
        explanation=SALARY_BREAKDOWN_EXPLANATION,
        formatted={
            name: format_currency(amount, currency)
            for name, amount in {"total": total, **parts}.items()
        },
        **parts,
    )


def _timestamp_dates(submission: Any) -> dict[str, dict[str, str]]:
    """Display (``DD.MM.YYYY``) and input (``YYYY-MM-DD``) forms of the row's timestamps."""
    dates: dict[str, dict[str, str]] = {}
    for name in _TIMESTAMP_FIELDS:
        value = getattr(submission, name)
        if not value:
            continue
        try:
            display = format_date_display(value)
        except ValueError:
            logger.warning("Unparseable %s on submission %s: %s", name, submission.id, value)
            continue
        dates[name] = {"display": display, "input": format_date_for_input(value)}
    return dates


@app.get(
    "/api/onboarding/{submission_id}",
    response_model=OnboardingViewResponse,
    responses=_ONBOARDING_ERRORS,
)
def get_onboarding(submission_id: str) -> Any:
    """Load a submission and tell the client which form to show."""
    service = _get_service()
    state, submission = service.resolve_view(submission_id)
    if state == PageState.NOT_FOUND or submission is None:
        return JSONResponse(
            status_code=404, content={"error": "Form not found", "state": state.value}
        )

    document_urls: dict[str, str] = {}
    documents = submission.documents
    if documents is not None:
        slots = {
            "photo": documents.photo,
            "passport": documents.passport,
            "eid": documents.eid,
        }
        if documents.passportPages is not None:
            slots["cover"] = documents.passportPages.cover
            slots["insidePages"] = documents.passportPages.insidePages
        document_urls = {
            slot: service.store.get_document_url(ref.path)
            for slot, ref in slots.items()
            if ref is not None
        }

    step = submission.current_step.value
    if state == PageState.ALREADY_COMPLETE:
        step = "complete"
    return OnboardingViewResponse(
        state=state.value,
        submission=submission.model_dump(mode="json", exclude=_PRIVATE_FIELDS),
        progress=progress_as_dicts(step, submission.is_same_person),
        document_urls=document_urls,
        dates=_timestamp_dates(submission),
    )


def _submit_response(outcome: Any) -> SubmitResponse:
    return SubmitResponse(
        submission_id=outcome.submission_id,
        step=outcome.step,
        portal_notified=outcome.portal_notified,
        portal_error=outcome.portal_error,
    )


@app.post(
    "/api/onboarding/{submission_id}/employer",
    response_model=SubmitResponse,
    responses=_ONBOARDING_ERRORS,
)
def submit_employer(
    submission_id: str, body: EmployerSubmitRequest, request: Request
) -> SubmitResponse:
    """Save the signed employer section."""
    outcome = _get_service().submit_employer(
        submission_id, body.data, body.signature, get_client_ip(request.headers)
    )
    return _submit_response(outcome)


@app.post(
    "/api/onboarding/{submission_id}/employee",
    response_model=SubmitResponse,
    responses=_ONBOARDING_ERRORS,
)
def submit_employee(
    submission_id: str, body: EmployeeSubmitRequest, request: Request
) -> SubmitResponse:
    """Save the signed employee section."""
    outcome = _get_service().submit_employee(
        submission_id, body.data, body.signature, get_client_ip(request.headers)
    )
    return _submit_response(outcome)


@app.post(
    "/api/onboarding/{submission_id}/combined",
    response_model=SubmitResponse,
    responses=_ONBOARDING_ERRORS,
)
def submit_combined(
    submission_id: str, body: CombinedSubmitRequest, request: Request
) -> SubmitResponse:
    """Save both sections when the employer is also the employee."""
    outcome = _get_service().submit_combined(
        submission_id,
        body.employer,
        body.employee,
        body.signature,
        get_client_ip(request.headers),
    )
    return _submit_response(outcome)


def _upload_response(outcome: UploadOutcome) -> UploadResponse:
    return UploadResponse(
        slot=outcome.slot,
        accepted=outcome.accepted,
        reference=outcome.reference,
        messages=outcome.messages,
        check=outcome.check,
        prefill=outcome.prefill,
    )


@app.post(
    "/api/onboarding/{submission_id}/documents/{slot}",
    response_model=UploadResponse,
    responses=_ONBOARDING_ERRORS,
)
async def upload_document(
    submission_id: str,
    slot: str,
    file: Annotated[UploadFile, File(...)],
) -> Any:
    """Upload a document into one of the submission's slots.

    Photos and passport pages must be images; the single passport scan and
    the Emirates ID may also be PDFs.
    """
    if slot not in _DOCUMENT_SLOTS:
        return JSONResponse(status_code=404, content={"error": f"Unknown document slot: {slot}"})

    content_type = file.content_type or "application/octet-stream"
    is_image = content_type.startswith("image/")
    if not is_image and not (slot in _PDF_ALLOWED_SLOTS and content_type == "application/pdf"):
        return JSONResponse(status_code=400, content={"error": "Please select an image file"})

    content = await file.read()
    max_bytes = _get_config().vision.max_upload_bytes
    if len(content) > max_bytes:
        return JSONResponse(
            status_code=400,
            content={"error": f"File size must be less than {max_bytes // (1024 * 1024)}MB"},
        )

    service = _get_service()
    filename = file.filename or slot
    if slot == "photo":
        outcome = service.attach_photo(submission_id, filename, content, content_type)
    elif slot == "passport":
        outcome = service.attach_passport(submission_id, filename, content, content_type)
    elif slot == "eid":
        outcome = service.attach_eid(submission_id, filename, content, content_type)
    else:
        outcome = service.attach_passport_page(
            submission_id, slot, filename, content, content_type
        )
    return _upload_response(outcome)


@app.delete(
    "/api/onboarding/{submission_id}/documents/{slot}", responses=_ONBOARDING_ERRORS
)
def remove_document(submission_id: str, slot: str) -> Any:
    """Clear a document slot so a new file can be uploaded."""
    if slot not in _DOCUMENT_SLOTS:
        return JSONResponse(status_code=404, content={"error": f"Unknown document slot: {slot}"})
    documents = _get_service().remove_document(submission_id, slot)
    return {"success": True, "documents": documents.to_column()}
