"""Visa photo validation with Claude Vision.

Checks an uploaded portrait against the UAE visa photo requirements
that commonly cause rejections. The prompt is deliberately lenient:
every photo is reviewed by a person afterwards.
"""

from dataclasses import asdict, dataclass, field

from staff_onboarding.utils.config import VisionConfig
from staff_onboarding.utils.logger import get_logger

from .client import (
    VisionResponseError,
    as_score,
    as_text_list,
    ask_about_image,
    extract_json_object,
)

logger = get_logger(__name__)

PHOTO_VALIDATION_PROMPT = """Analyze this passport/visa photo against UAE visa photo requirements.

ONLY check these CRITICAL requirements (ignore everything else like clothing, hairstyle, etc.):

1. BACKGROUND: Must be white or light colored (not busy/patterned)
2. FACE VISIBLE: Full face clearly visible, not obscured
3. EYES: Both eyes open and visible (no hair covering eyes)
4. GLASSES: No glasses (this is strict - any glasses = fail)
5. FACE ANGLE: Looking at camera, face not turned sideways
6. HEAD COVERING: Only religious head coverings allowed (face must still be visible)
7. IMAGE QUALITY: Not blurry, reasonably clear
8. SINGLE PERSON: Only one person in photo
9. OBVIOUS ISSUES: No sunglasses, masks, or face covered

DO NOT flag these (they are acceptable):
- Clothing style, color, or patterns
- Hair style or if hair looks "messy"
- Minor shadows that don't obscure the face
- Slight smile (only flag wide open-mouth smiles)
- Exact face size percentage (as long as face is clearly visible)
- Minor lighting variations

BE LENIENT. This photo will be reviewed by a human anyway. Only reject if there's a CLEAR problem that would definitely cause the visa photo to be rejected.

Return JSON:
{
  "valid": true or false,
  "errors": ["only list REAL problems"],
  "suggestions": ["how to fix"],
  "confidence": 0-100
}

When in doubt, ACCEPT the photo."""


@dataclass
class PhotoValidationResult:
    """Outcome of a visa photo check."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    confidence: float = 0

    def messages(self) -> list[str]:
        """Pair each error with the suggestion at the same position."""
        combined = []
        for i, error in enumerate(self.errors):
            suggestion = self.suggestions[i] if i < len(self.suggestions) else None
            combined.append(f"{error} - {suggestion}" if suggestion else error)
        return combined

    def to_dict(self) -> dict:
        return asdict(self)


def photo_failure() -> PhotoValidationResult:
    return PhotoValidationResult(
        valid=False,
        errors=["Unable to validate photo. Please try again."],
        suggestions=["Ensure the image is clear and try uploading again."],
        confidence=0,
    )


def validate_photo(image: str, config: VisionConfig | None = None) -> PhotoValidationResult:
    """Validate a visa photo.

    Args:
        image: Base64 image, with or without a data URL prefix.
        config: Vision settings; defaults apply when omitted.

    Returns:
        The model's verdict, or a generic failure result if the call or
        the reply parsing fails.
    """
    config = config or VisionConfig()
    try:
        text = ask_about_image(
            image,
            PHOTO_VALIDATION_PROMPT,
            model=config.fast_model,
            max_tokens=config.photo_max_tokens,
            timeout=config.photo_timeout_s,
        )
        raw = extract_json_object(text)

        if not isinstance(raw.get("valid"), bool):
            raise VisionResponseError("Invalid response: missing valid field")

        result = PhotoValidationResult(
            valid=raw["valid"],
            errors=as_text_list(raw.get("errors")),
            suggestions=as_text_list(raw.get("suggestions")),
            confidence=as_score(raw.get("confidence")),
        )
        logger.info(
            "Photo validation: valid=%s confidence=%s errors=%d",
            result.valid,
            result.confidence,
            len(result.errors),
        )
        return result
    except Exception as exc:
        logger.error("Photo validation error: %s", exc)
        return photo_failure()
