"""Services package."""

from statement_parser.services.export import (
    export_filename,
    transactions_to_csv,
    transactions_to_csv_bytes,
)
from statement_parser.services.google import (
    GoogleAuthError,
    GoogleOAuthService,
    GoogleSheetsExporter,
    SheetsAuthError,
    SheetsExportError,
)
from statement_parser.services.statement_reader import (
    StatementContent,
    StatementReadError,
    UnsupportedStatementError,
    detect_statement_type,
    read_statement,
)

__all__ = [
    # Statement reading
    "StatementContent",
    "StatementReadError",
    "UnsupportedStatementError",
    "detect_statement_type",
    "read_statement",
    # CSV export
    "export_filename",
    "transactions_to_csv",
    "transactions_to_csv_bytes",
    # Google services
    "GoogleAuthError",
    "GoogleOAuthService",
    "GoogleSheetsExporter",
    "SheetsAuthError",
    "SheetsExportError",
]
