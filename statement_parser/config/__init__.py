"""Configuration package."""

from statement_parser.config.settings import (
    AppSettings,
    GeminiSettings,
    GoogleOAuthSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GeminiSettings",
    "GoogleOAuthSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
