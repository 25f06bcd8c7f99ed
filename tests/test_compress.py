"""Tests for image preparation before vision calls."""

import base64
import io

import pytest
from PIL import Image

from staff_onboarding.imaging.compress import (
    ImagePayloadError,
    compress_image_for_ai,
    decode_image_payload,
    to_data_url,
)


def _decode(data_url: str) -> Image.Image:
    prefix = "data:image/jpeg;base64,"
    assert data_url.startswith(prefix)
    return Image.open(io.BytesIO(base64.b64decode(data_url[len(prefix):])))


class TestDecodeImagePayload:
    """Tests for decode_image_payload."""

    def test_bytes_pass_through(self) -> None:
        assert decode_image_payload(b"raw") == b"raw"

    def test_data_url(self) -> None:
        assert decode_image_payload("data:image/png;base64,aGVsbG8=") == b"hello"

    def test_bare_base64(self) -> None:
        assert decode_image_payload("aGVsbG8=") == b"hello"

    def test_invalid_base64(self) -> None:
        with pytest.raises(ImagePayloadError):
            decode_image_payload("not base64 at all!")


class TestCompressImage:
    """Tests for compress_image_for_ai."""

    def test_large_image_downscaled(self, image_factory) -> None:
        result = compress_image_for_ai(image_factory((3000, 2000)))
        img = _decode(result)
        assert img.format == "JPEG"
        assert img.size == (1500, 1000)

    def test_small_image_not_enlarged(self, png_bytes: bytes) -> None:
        img = _decode(compress_image_for_ai(png_bytes))
        assert img.size == (300, 200)

    def test_custom_dimension(self, image_factory) -> None:
        img = _decode(compress_image_for_ai(image_factory((800, 1600)), max_dimension=400))
        assert img.size == (200, 400)

    def test_accepts_data_url(self, png_data_url: str) -> None:
        assert compress_image_for_ai(png_data_url).startswith("data:image/jpeg;base64,")

    def test_rgba_converted(self) -> None:
        buf = io.BytesIO()
        Image.new("RGBA", (50, 50), (255, 0, 0, 128)).save(buf, format="PNG")
        img = _decode(compress_image_for_ai(buf.getvalue()))
        assert img.mode == "RGB"

    def test_not_an_image(self) -> None:
        with pytest.raises(ImagePayloadError):
            compress_image_for_ai(b"%PDF-1.4 not an image")


class TestToDataUrl:
    def test_prefix(self) -> None:
        assert to_data_url(b"hello", "application/pdf") == (
            "data:application/pdf;base64,aGVsbG8="
        )
