"""Passport data extraction with Claude Vision.

Reads the data page (cross-checked against the MRZ) so the employee form
can be pre-filled. The accurate model tier is used here because typos in
passport numbers are costly downstream.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

from staff_onboarding.forms.helpers import parse_date_to_iso
from staff_onboarding.utils.config import VisionConfig
from staff_onboarding.utils.logger import get_logger

from .client import VisionResponseError, ask_about_image, extract_json_object

logger = get_logger(__name__)

PDF_NOT_SUPPORTED = "Please upload an image file (JPG or PNG) of your passport, not a PDF."
EXTRACTION_FAILED = (
    "Unable to extract passport data. Please ensure the image is clear and try again."
)

PASSPORT_EXTRACTION_PROMPT = """Extract information from this passport image.

Look for and extract:
1. First name (given name only - the FIRST given name, not middle names)
2. Middle name(s) (all names between first name and family name)
3. Family name / Surname
4. Passport number (usually near top right, 6-9 alphanumeric characters)
5. Issue date (date of issue)
6. Expiry date (date of expiry)
7. Nationality / Citizenship
8. Date of birth
9. Gender (Male/Female)
10. Place of birth

IMPORTANT formatting rules:
- Convert ALL dates to DD.MM.YYYY format (e.g., 15.03.2025)
- Convert names from ALL CAPS to Title Case (e.g., JOHN SMITH -> John Smith)
- Keep passport number in original format (usually uppercase)

Also check the MRZ (Machine Readable Zone - the two lines of characters at the bottom of the passport):
- Verify passport number matches
- Verify expiry date matches
- If MRZ is readable, use it to cross-verify extracted data

Respond with a JSON object in exactly this format:
{
  "success": true,
  "data": {
    "first_name": "John",
    "middle_name": "Michael",
    "family_name": "Smith",
    "passport_no": "X12345678",
    "passport_issue_date": "15.03.2020",
    "passport_expiry_date": "15.03.2030",
    "nationality": "United Kingdom",
    "date_of_birth": "25.12.1985",
    "gender": "Male",
    "place_of_birth": "London"
  },
  "confidence": {
    "passport_no": "high",
    "expiry_date": "high"
  },
  "mrz_verified": true
}

If a field is not visible or cannot be extracted, omit it from the data object.
If you cannot read the passport at all, return:
{
  "success": false,
  "data": {},
  "confidence": {},
  "mrz_verified": false,
  "error": "Description of the problem"
}"""

# extraction key -> employee form key
_FIELD_MAP: dict[str, str] = {
    "first_name": "first_name",
    "middle_name": "middle_name",
    "family_name": "last_name",
    "nationality": "nationality",
    "passport_no": "passport_number",
}

_DATE_FIELD_MAP: dict[str, str] = {
    "passport_expiry_date": "passport_expiry",
    "date_of_birth": "date_of_birth",
}


@dataclass
class PassportExtractionResult:
    """Fields read from a passport image."""

    success: bool
    data: dict[str, Any] = field(default_factory=dict)
    confidence: dict[str, str] = field(default_factory=dict)
    mrz_verified: bool = False
    error: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def extraction_failure(message: str = EXTRACTION_FAILED) -> PassportExtractionResult:
    return PassportExtractionResult(success=False, error=message)


def extract_passport(
    image: str, config: VisionConfig | None = None
) -> PassportExtractionResult:
    """Extract personal data from a passport image.

    PDFs are refused without calling the model.

    Args:
        image: Base64 image, with or without a data URL prefix.
        config: Vision settings; defaults apply when omitted.

    Returns:
        Extraction result; ``success`` is ``False`` with an ``error``
        message when nothing usable came back.
    """
    if "data:application/pdf" in image:
        return extraction_failure(PDF_NOT_SUPPORTED)

    config = config or VisionConfig()
    try:
        text = ask_about_image(
            image,
            PASSPORT_EXTRACTION_PROMPT,
            model=config.accurate_model,
            max_tokens=config.extraction_max_tokens,
            timeout=config.extraction_timeout_s,
        )
        raw = extract_json_object(text)

        if not isinstance(raw.get("success"), bool):
            raise VisionResponseError("Invalid response: missing success field")

        data = raw.get("data")
        confidence = raw.get("confidence")
        error = raw.get("error")
        result = PassportExtractionResult(
            success=raw["success"],
            data=dict(data) if isinstance(data, dict) else {},
            confidence=(
                {str(k): str(v) for k, v in confidence.items()}
                if isinstance(confidence, dict)
                else {}
            ),
            mrz_verified=bool(raw.get("mrz_verified")),
            error=str(error) if error else None,
        )
        logger.info(
            "Passport extraction: success=%s fields=%d mrz_verified=%s",
            result.success,
            len(result.data),
            result.mrz_verified,
        )
        return result
    except Exception as exc:
        logger.error("Passport extraction error: %s", exc)
        return extraction_failure()


def to_employee_fields(result: PassportExtractionResult) -> dict[str, Any]:
    """Map extracted passport data onto employee form fields.

    Dates arrive as ``DD.MM.YYYY`` and are stored as ISO dates. Absent or
    empty values are left out so they never overwrite what the employee
    already typed.
    """
    if not result.success:
        return {}

    data = result.data
    fields: dict[str, Any] = {
        form_key: data[key] for key, form_key in _FIELD_MAP.items() if data.get(key)
    }

    for key, form_key in _DATE_FIELD_MAP.items():
        if data.get(key):
            iso = parse_date_to_iso(str(data[key]))
            if iso:
                fields[form_key] = iso

    gender = str(data.get("gender") or "").strip().lower()
    if gender in ("male", "female"):
        fields["gender"] = gender

    return fields
