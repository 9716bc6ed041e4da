"""Export services package."""

from statement_parser.services.export.csv_export import (
    CSV_MIME_TYPE,
    EXPORT_HEADERS,
    export_filename,
    format_number,
    transaction_to_csv_row,
    transaction_to_row,
    transactions_to_csv,
    transactions_to_csv_bytes,
)

__all__ = [
    "CSV_MIME_TYPE",
    "EXPORT_HEADERS",
    "export_filename",
    "format_number",
    "transaction_to_csv_row",
    "transaction_to_row",
    "transactions_to_csv",
    "transactions_to_csv_bytes",
]
