"""
Configuration loader for the skill extraction service.

Loads all settings from environment variables (.env file).
Validates required settings and provides type-safe access.
"""

import os
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """
    Centralized configuration for extraction components.

    All values loaded from environment variables - NO SECRETS IN CODE.
    """

    # ===== Vertex AI (Gemini) =====
    # Empty project id puts the extraction client into mock mode
    GCP_PROJECT_ID: str = os.getenv("GCP_PROJECT_ID", "")
    GCP_LOCATION: str = os.getenv("GCP_LOCATION", "us-central1")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash-lite-001")

    # Generation settings (deterministic-leaning sampling)
    MAX_OUTPUT_TOKENS: int = 8192
    EXTRACTION_TEMPERATURE: float = 0.2
    EXTRACTION_TOP_P: float = 0.8

    # ===== Blob Storage =====
    GCS_BUCKET_NAME: str = os.getenv("GCS_BUCKET_NAME", "skill-sense-uploads")

    # ===== Source Hosts =====
    GITHUB_TOKEN: str = os.getenv("GITHUB_TOKEN", "")
    GITHUB_API_URL: str = os.getenv("GITHUB_API_URL", "https://api.github.com")

    # ===== MongoDB (profile store) =====
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "skill_sense")
    PROFILES_COLLECTION: str = os.getenv("PROFILES_COLLECTION", "profiles")

    # ===== Job Queue =====
    JOB_WORKER_COUNT: int = int(os.getenv("JOB_WORKER_COUNT", "4"))
    # Delay before a job with no registered processor is marked completed
    JOB_FALLBACK_DELAY_SECONDS: float = float(os.getenv("JOB_FALLBACK_DELAY_SECONDS", "2.0"))

    # ===== Logging =====
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "simple")

    @classmethod
    def is_model_configured(cls) -> bool:
        """True when a Vertex AI project is set (otherwise mock extraction)."""
        return bool(cls.GCP_PROJECT_ID)

    @classmethod
    def validate(cls) -> None:
        """
        Validate settings required for the persistent wiring.

        Mock extraction mode needs no credentials, so GCP_PROJECT_ID is
        not required here.

        Raises:
            ValueError: If critical settings are missing
        """
        required_settings = {
            "MONGODB_URI": cls.MONGODB_URI,
            "GCS_BUCKET_NAME": cls.GCS_BUCKET_NAME,
        }

        missing: List[str] = [name for name, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}. "
                f"Please check your .env file."
            )

        if cls.JOB_WORKER_COUNT < 1:
            raise ValueError("JOB_WORKER_COUNT must be at least 1")

    @classmethod
    def summary(cls) -> str:
        """Return a summary of the current configuration (safe for logging)."""
        return f"""
Configuration Summary:
  Vertex AI: {cls.GCP_PROJECT_ID + ' / ' + cls.GCP_LOCATION if cls.GCP_PROJECT_ID else '✗ Missing (mock extraction)'}
  Model: {cls.GEMINI_MODEL}
  Blob bucket: {cls.GCS_BUCKET_NAME}
  GitHub token: {'✓ Configured' if cls.GITHUB_TOKEN else '✗ Missing (unauthenticated)'}
  MongoDB: {'✓ Configured' if cls.MONGODB_URI else '✗ Missing'} ({cls.MONGODB_DATABASE}.{cls.PROFILES_COLLECTION})
  Job workers: {cls.JOB_WORKER_COUNT}
        """.strip()


# Validate configuration on import (fail fast if misconfigured)
# Left disabled so mock extraction works without any credentials
# Config.validate()
