"""
Document CRUD Gateway — Application Configuration
==================================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before app starts.

Firestore credentials are resolved in this order:
    1. FIREBASE_SERVICE_ACCOUNT_KEY  (full service account JSON in one variable)
    2. FIREBASE_SERVICE_ACCOUNT_PATH (path to a service account JSON file)
    3. Application Default Credentials (gcloud, GKE/Cloud Run metadata, or the
       emulator when FIRESTORE_EMULATOR_HOST is set)
"""

from typing import List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    Attributes are grouped by concern for readability.
    """

    # ── API ───────────────────────────────────────────────────────────────
    # What: Shared mount path for the four CRUD routes
    # Format: Leading slash, no trailing slash ("/api", "/v1/docs"); "" mounts at root
    api_prefix: str = Field(default="/api")

    @field_validator("api_prefix")
    @classmethod
    def normalize_api_prefix(cls, v: str) -> str:
        """Strips trailing slashes and guarantees a single leading slash."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

    # ── Firestore ─────────────────────────────────────────────────────────
    # What: Google Cloud project holding the Firestore database
    # Falls back to the project_id inside the service account key when empty
    firestore_project_id: Optional[str] = Field(default=None)

    # What: Named Firestore database within the project
    firestore_database: str = Field(default="(default)")

    # What: Service account JSON, either inline or as a file path
    # Secret: SecretStr keeps the key out of reprs and logs
    firebase_service_account_key: Optional[SecretStr] = Field(default=None)
    firebase_service_account_path: Optional[str] = Field(default=None)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (split by cors_origins_list)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # What: Per-IP sliding window rate limit
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_requests: int = Field(default=100, ge=10, le=10000)
    rate_limit_window: int = Field(default=3600, ge=60, le=86400)  # seconds

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that the Firestore connection can be configured.
        When:  Called during app startup (lifespan).
        How:   Checks the credential sources and raises ValueError with guidance.
        """
        errors = []
        has_key = bool(
            self.firebase_service_account_key
            and self.firebase_service_account_key.get_secret_value()
        )
        if not has_key and not self.firebase_service_account_path and not self.firestore_project_id:
            errors.append(
                "No Firestore project configured. Set FIRESTORE_PROJECT_ID "
                "(with Application Default Credentials), FIREBASE_SERVICE_ACCOUNT_KEY, "
                "or FIREBASE_SERVICE_ACCOUNT_PATH."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
