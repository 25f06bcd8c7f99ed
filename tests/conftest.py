"""Shared test fixtures for the staff onboarding test suite."""

import base64
import io
from pathlib import Path

import pytest
from PIL import Image

from staff_onboarding.vision.client import reset_vision_client

_ENV_VARS = (
    "ANTHROPIC_API_KEY",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "NEXT_PUBLIC_SUPABASE_URL",
    "NEXT_PUBLIC_SUPABASE_ANON_KEY",
    "TME_PORTAL_URL",
)


def make_image_bytes(
    size: tuple[int, int] = (300, 200), image_format: str = "PNG", color: str = "white"
) -> bytes:
    """Create a small solid-colour image in the given format."""
    img = Image.new("RGB", size, color)
    buf = io.BytesIO()
    img.save(buf, format=image_format)
    return buf.getvalue()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials out of every test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_vision_client()
    yield
    reset_vision_client()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def png_data_url(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"


@pytest.fixture
def image_factory():
    """Factory for synthetic images of a given size and format."""
    return make_image_bytes
