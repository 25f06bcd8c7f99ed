"""Shrink uploaded images before sending them to the vision model.

Claude rejects images over 5 MB of base64, and phone photos routinely
exceed that. Downscaling to 1500 px on the long side keeps plenty of
detail for classification and OCR.
"""

import base64
import binascii
import io
import re

from PIL import Image, ImageOps, UnidentifiedImageError

from staff_onboarding.utils.logger import get_logger

logger = get_logger(__name__)

_DATA_URL_RE = re.compile(r"^data:[\w/+.-]+;base64,")


class ImagePayloadError(ValueError):
    """Raised when an upload cannot be decoded as an image."""


def decode_image_payload(image: str | bytes) -> bytes:
    """Return raw bytes from a data URL, bare base64 string, or bytes.

    Raises:
        ImagePayloadError: If the string is not valid base64.
    """
    if isinstance(image, bytes):
        return image
    encoded = _DATA_URL_RE.sub("", image.strip())
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImagePayloadError("Invalid base64 image data") from exc


def to_data_url(content: bytes, media_type: str) -> str:
    return f"data:{media_type};base64,{base64.b64encode(content).decode('ascii')}"


def compress_image_for_ai(
    image: str | bytes, max_dimension: int = 1500, quality: int = 80
) -> str:
    """Downscale and re-encode an image as a JPEG data URL.

    The aspect ratio is kept and images already within ``max_dimension``
    are not enlarged. EXIF orientation is applied first so portrait phone
    photos stay upright.

    Args:
        image: Data URL, base64 string, or raw bytes.
        max_dimension: Longest allowed side in pixels.
        quality: JPEG quality (1-95).

    Returns:
        ``data:image/jpeg;base64,...`` string.

    Raises:
        ImagePayloadError: If the payload is not a readable image.
    """
    raw = decode_image_payload(image)
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img = ImageOps.exif_transpose(img)
            original_size = img.size
            rgb = img.convert("RGB")
    except (UnidentifiedImageError, OSError) as exc:
        raise ImagePayloadError("Unsupported or corrupt image") from exc

    rgb.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

    buf = io.BytesIO()
    rgb.save(buf, format="JPEG", quality=quality)
    compressed = buf.getvalue()

    logger.debug(
        "Compressed image %sx%s -> %sx%s (%d -> %d bytes)",
        original_size[0],
        original_size[1],
        rgb.size[0],
        rgb.size[1],
        len(raw),
        len(compressed),
    )
    return to_data_url(compressed, "image/jpeg")
