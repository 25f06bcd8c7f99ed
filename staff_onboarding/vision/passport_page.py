"""Passport page classification with Claude Vision.

Used to make sure the cover and the open inside pages are uploaded to
the right slots.
"""

from dataclasses import asdict, dataclass
from enum import StrEnum

from staff_onboarding.utils.config import VisionConfig
from staff_onboarding.utils.logger import get_logger

from .client import as_score, ask_about_image, extract_json_object

logger = get_logger(__name__)


class PassportPageType(StrEnum):
    COVER = "COVER"
    INSIDE_PAGES = "INSIDE_PAGES"
    INVALID = "INVALID"


PAGE_TYPE_LABELS: dict[PassportPageType, str] = {
    PassportPageType.COVER: "Passport Cover",
    PassportPageType.INSIDE_PAGES: "Inside Pages (open passport with both pages)",
    PassportPageType.INVALID: "Valid Passport Page",
}

PASSPORT_PAGE_VALIDATION_PROMPT = """How many passport pages are visible in this image?

- If it's the outside cover of a closed passport: return "COVER"
- If 2 pages visible (open passport lying flat): return "INSIDE_PAGES"
- If only 1 page visible (just the data page): return "INVALID"
- If not a passport: return "INVALID"

Return JSON:
{
  "page_type": "COVER" | "INSIDE_PAGES" | "INVALID",
  "confidence": 0-100,
  "pages_visible": number
}"""


@dataclass
class PassportPageValidationResult:
    """What kind of passport page an image shows."""

    page_type: PassportPageType
    confidence: float
    details: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["page_type"] = self.page_type.value
        return data


def validate_passport_page(
    image: str, config: VisionConfig | None = None
) -> PassportPageValidationResult:
    """Classify a passport image as cover, inside pages or invalid.

    Anything the model answers outside the three known types counts as
    ``INVALID``. Call or parse failures also come back as ``INVALID``.
    """
    config = config or VisionConfig()
    try:
        text = ask_about_image(
            image,
            PASSPORT_PAGE_VALIDATION_PROMPT,
            model=config.fast_model,
            max_tokens=config.page_max_tokens,
            timeout=config.page_timeout_s,
        )
        raw = extract_json_object(text)

        try:
            page_type = PassportPageType(raw.get("page_type"))
        except ValueError:
            page_type = PassportPageType.INVALID

        result = PassportPageValidationResult(
            page_type=page_type,
            confidence=as_score(raw.get("confidence")),
            details=str(raw.get("details") or "Unable to determine page type"),
        )
        logger.info(
            "Passport page classified as %s (confidence %s)",
            result.page_type.value,
            result.confidence,
        )
        return result
    except Exception as exc:
        logger.error("Passport page validation error: %s", exc)
        return PassportPageValidationResult(
            page_type=PassportPageType.INVALID,
            confidence=0,
            details="Unable to validate passport page. Please try again.",
        )


def check_expected_page(
    result: PassportPageValidationResult, expected: PassportPageType | None
) -> tuple[bool, str | None]:
    """Compare a classification with the slot it was uploaded to.

    Returns:
        Tuple of (matches, user-facing error message or ``None``).
    """
    if expected is None or result.page_type == expected:
        return True, None
    return False, (
        f"This doesn't appear to be a {PAGE_TYPE_LABELS[expected]}. "
        "Please upload the correct page."
    )
