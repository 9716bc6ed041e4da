"""
Configuration Management for Bank Statement Parser

Every value comes from the environment or a .env file (see .env.example).

DESIGN DECISION: Each external service has its own settings class with its
own env prefix, loaded on first access. A missing Gemini key therefore
does not stop the page from rendering its status panel.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_GOOGLE_SCOPES = ",".join([
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.file",
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
])


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=4000,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )
    request_timeout_seconds: int = Field(
        default=120,
        ge=10,
        le=600,
        description="Timeout for a single extraction request"
    )


class GoogleOAuthSettings(BaseSettings):
    """Google OAuth client configuration (web application client)."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_OAUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    client_id: str = Field(
        ...,
        description="OAuth client ID from the Google Cloud console"
    )
    client_secret: str = Field(
        ...,
        description="OAuth client secret"
    )
    redirect_uri: str = Field(
        default="http://localhost:8501",
        description="Redirect URI registered for the client (the app URL)"
    )
    scopes: str = Field(
        default=DEFAULT_GOOGLE_SCOPES,
        description="Comma-separated OAuth scopes"
    )

    @property
    def scopes_list(self) -> list[str]:
        """Get scopes as a list."""
        return [scope.strip() for scope in self.scopes.split(",") if scope.strip()]


class AppSettings(BaseSettings):
    """
    Upload limits, CSV truncation and export naming.

    No prefix: MAX_UPLOAD_SIZE_MB, CSV_MAX_CHARS, ...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # File upload limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum upload file size in MB"
    )
    supported_statement_formats: str = Field(
        default="pdf,csv",
        description="Comma-separated list of supported statement formats"
    )
    csv_max_chars: int = Field(
        default=15000,
        ge=1000,
        le=200000,
        description="CSV text is truncated to this many characters before extraction"
    )

    # Export naming
    sheet_title_prefix: str = Field(
        default="Bank Transactions",
        description="Title prefix for exported spreadsheets"
    )
    worksheet_title: str = Field(
        default="Transactions",
        description="Title of the worksheet holding the transactions"
    )

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported formats as a list."""
        return [fmt.strip().lower() for fmt in self.supported_statement_formats.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


class Settings(BaseSettings):
    """
    Entry point to the per-service settings.

    Each property builds its settings class on access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def google_oauth(self) -> GoogleOAuthSettings:
        return GoogleOAuthSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """Shared settings instance; get_settings.cache_clear() reloads it."""
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Try loading every settings class.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the ones that failed.
    Backs the connection status sidebar.
    """
    results = {}

    settings = get_settings()

    checks = {
        "gemini": lambda: settings.gemini,
        "google_oauth": lambda: settings.google_oauth,
        "app": lambda: settings.app,
    }

    for name, load in checks.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
