"""Shared Claude Vision client and response helpers.

One Anthropic client is created lazily and reused by every vision
check. Each check sends a single image plus instructions and expects a
JSON object somewhere in the reply text.
"""

import json
import math
import re
from typing import Any

import anthropic

from staff_onboarding.utils.config import VisionConfig, load_secrets
from staff_onboarding.utils.logger import get_logger

logger = get_logger(__name__)

_DATA_URL_PREFIX_RE = re.compile(r"^data:image/\w+;base64,")
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

_client: anthropic.Anthropic | None = None


class VisionConfigError(RuntimeError):
    """Raised when the vision service cannot be configured."""


class VisionResponseError(ValueError):
    """Raised when the model's reply cannot be used."""


def get_vision_client(config: VisionConfig | None = None) -> anthropic.Anthropic:
    """Return the shared Anthropic client, creating it on first use.

    Raises:
        VisionConfigError: If ``ANTHROPIC_API_KEY`` is not set.
    """
    global _client
    if _client is None:
        api_key = load_secrets().anthropic_api_key
        if not api_key:
            raise VisionConfigError("ANTHROPIC_API_KEY not configured")
        timeout = (config or VisionConfig()).client_timeout_s
        _client = anthropic.Anthropic(api_key=api_key, timeout=timeout)
        logger.debug("Created Anthropic client (timeout %.0fs)", timeout)
    return _client


def reset_vision_client() -> None:
    """Drop the shared client so the next call rebuilds it."""
    global _client
    _client = None


def is_vision_configured() -> bool:
    return bool(load_secrets().anthropic_api_key)


def strip_data_url(image: str) -> str:
    """Remove a ``data:image/...;base64,`` prefix if present."""
    return _DATA_URL_PREFIX_RE.sub("", image)


def detect_media_type(image: str) -> str:
    """Media type declared by a data URL; JPEG when it says nothing else."""
    if "data:image/png" in image:
        return "image/png"
    if "data:image/gif" in image:
        return "image/gif"
    if "data:image/webp" in image:
        return "image/webp"
    return "image/jpeg"


def ask_about_image(
    image: str,
    prompt: str,
    model: str,
    max_tokens: int,
    timeout: float,
    client: anthropic.Anthropic | None = None,
) -> str:
    """Send one image with instructions and return the reply text.

    Args:
        image: Base64 image, with or without a data URL prefix.
        prompt: Instructions placed after the image.
        model: Claude model name.
        max_tokens: Reply token limit.
        timeout: Per-request timeout in seconds.
        client: Client to use instead of the shared one.

    Returns:
        Text of the first text block in the reply.

    Raises:
        VisionResponseError: If the reply has no text block.
        anthropic.APIError: On transport or API failures, including timeouts.
    """
    client = client or get_vision_client()
    response = client.messages.create(
        model=model,
        max_tokens=max_tokens,
        messages=[
            {
                "role": "user",
                "content": [
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": detect_media_type(image),
                            "data": strip_data_url(image),
                        },
                    },
                    {"type": "text", "text": prompt},
                ],
            }
        ],
        timeout=timeout,
    )

    for block in response.content:
        if block.type == "text":
            return block.text
    raise VisionResponseError("No text response from Claude")


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the JSON object embedded in free-form model output.

    Takes everything from the first ``{`` to the last ``}``.

    Raises:
        VisionResponseError: If there is no object or it does not parse.
    """
    match = _JSON_OBJECT_RE.search(text)
    if not match:
        raise VisionResponseError("Could not parse JSON response")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise VisionResponseError(f"Invalid JSON in response: {exc}") from exc
    if not isinstance(parsed, dict):
        raise VisionResponseError("JSON response is not an object")
    return parsed


def as_score(value: Any) -> float:
    """Read a 0-100 confidence score; anything non-numeric counts as 0."""
    if isinstance(value, bool):
        return 0
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0
    return score if math.isfinite(score) else 0


def as_text_list(value: Any) -> list[str]:
    """Coerce a reply's ``errors`` or ``suggestions`` into a list of strings."""
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value if item is not None]
    return [str(value)]
