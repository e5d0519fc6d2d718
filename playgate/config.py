"""
Application Configuration - Pydantic Settings for type-safe config.

NO DICTIONARIES - All configuration is strongly typed.
FAIL CLOSED - Nothing is required at startup; each request that needs a
missing value fails before any upstream call is made.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    api_title: str = "Playgate"
    api_version: str = "0.1.0"
    api_description: str = "Google sign-in and Google Play purchase verification"

    # Google Sign-In audiences, in priority order (first non-empty wins)
    ALLOWED_AUDIENCES: str = ""  # Comma-separated list (web + Android client IDs)
    GOOGLE_CLIENT_IDS: str = ""  # Comma-separated list, older deployments
    GOOGLE_CLIENT_ID: str = ""  # Single legacy client ID

    # Google Play Developer API service account (raw JSON or base64 encoded JSON)
    GP_SERVICE_ACCOUNT_JSON: str = ""

    # Firebase Admin SDK used to mint custom (session) tokens
    FIREBASE_CREDENTIALS_JSON: str = ""  # Empty = Application Default Credentials
    FIREBASE_PROJECT_ID: str = ""
    MINT_SESSION_TOKENS: bool = True

    # CORS
    CORS_ALLOW_ORIGIN: str = "*"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Observability - Metrics
    metrics_enabled: bool = True

    # Observability - Tracing
    tracing_enabled: bool = False
    otlp_endpoint: str = "http://otel-collector:4317"
    otlp_insecure: bool = True
    service_name: str = "playgate"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def audience_sources(self) -> list[tuple[str, str]]:
        """Audience configuration sources as (name, raw value), highest priority first."""
        return [
            ("ALLOWED_AUDIENCES", self.ALLOWED_AUDIENCES),
            ("GOOGLE_CLIENT_IDS", self.GOOGLE_CLIENT_IDS),
            ("GOOGLE_CLIENT_ID", self.GOOGLE_CLIENT_ID),
        ]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings instance (cached for the process lifetime)."""
    return Settings()
