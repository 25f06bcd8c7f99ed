"""Configuration management for the staff onboarding service.

Non-secret settings come from a YAML file with sensible defaults; API
keys and service URLs come from the environment (or a local ``.env``).
"""

import logging
import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/config.yaml")


class VisionConfig(BaseModel):
    """Settings for the Claude Vision calls."""

    fast_model: str = "claude-3-5-haiku-20241022"
    accurate_model: str = "claude-sonnet-4-20250514"
    client_timeout_s: float = 60.0
    photo_timeout_s: float = 30.0
    page_timeout_s: float = 30.0
    extraction_timeout_s: float = 45.0
    photo_max_tokens: int = 1024
    page_max_tokens: int = 512
    extraction_max_tokens: int = 2048
    max_image_dimension: int = 1500
    jpeg_quality: int = 80
    max_upload_bytes: int = 5 * 1024 * 1024


class StorageConfig(BaseModel):
    """Settings for the hosted database table and document bucket."""

    table: str = "staff_onboarding_submissions"
    bucket: str = "staff-documents"
    cache_control: str = "3600"


class PortalConfig(BaseModel):
    """Settings for the TME Portal callback."""

    base_url: str = "https://portal.tme-services.com"
    timeout_s: float = 15.0


class ValidationConfig(BaseModel):
    """Settings for the form rules engine."""

    rules_path: str = "configs/form_rules.yaml"


class AppConfig(BaseModel):
    """Top-level application configuration."""

    vision: VisionConfig = Field(default_factory=VisionConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    portal: PortalConfig = Field(default_factory=PortalConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    log_level: str = "INFO"


class Secrets(BaseModel):
    """Credentials and endpoints read from the environment."""

    anthropic_api_key: str | None = None
    supabase_url: str | None = None
    supabase_key: str | None = None
    portal_url: str | None = None


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        config = AppConfig(**raw)
    else:
        logger.info("No config file found at %s, using defaults", path)
        config = AppConfig()

    portal_url = load_secrets().portal_url
    if portal_url:
        config.portal.base_url = portal_url
    return config


def load_secrets(env_file: Path | None = None) -> Secrets:
    """Read credentials from the process environment.

    A ``.env`` file is loaded first when present; variables already set in
    the environment win. The ``NEXT_PUBLIC_*`` names used by the web
    frontend are accepted as fallbacks for the Supabase settings.

    Args:
        env_file: Explicit ``.env`` path. Defaults to ``./.env``.

    Returns:
        The secrets that are set; missing ones are ``None``.
    """
    env_path = env_file or Path(".env")
    if env_path.exists():
        load_dotenv(env_path, override=False)

    return Secrets(
        anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY") or None,
        supabase_url=(
            os.environ.get("SUPABASE_URL")
            or os.environ.get("NEXT_PUBLIC_SUPABASE_URL")
            or None
        ),
        supabase_key=(
            os.environ.get("SUPABASE_KEY")
            or os.environ.get("NEXT_PUBLIC_SUPABASE_ANON_KEY")
            or None
        ),
        portal_url=os.environ.get("TME_PORTAL_URL") or None,
    )
