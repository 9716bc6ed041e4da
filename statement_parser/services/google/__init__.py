"""
Google Services Package

OAuth sign-in for the user and export of transactions to Google Sheets.
"""

from statement_parser.services.google.auth import (
    GoogleAuthError,
    GoogleOAuthService,
)
from statement_parser.services.google.sheets import (
    GoogleSheetsExporter,
    SheetsAuthError,
    SheetsExportError,
)

__all__ = [
    # Auth
    "GoogleAuthError",
    "GoogleOAuthService",
    # Sheets
    "GoogleSheetsExporter",
    "SheetsAuthError",
    "SheetsExportError",
]
