"""
Statement Reader

Classifies an uploaded file and prepares its content for extraction:
- CSV statements are decoded to text and truncated so the prompt stays
  within a predictable size.
- PDF statements are passed through as raw bytes; the model reads the
  document itself.

CRITICAL: Only .csv and .pdf files are accepted. We do NOT sniff
content to guess at other formats.
"""

from pathlib import PurePath
from typing import Optional

from pydantic import BaseModel, Field

from statement_parser.config import get_settings
from statement_parser.models.transaction import StatementType, StatementUpload


class StatementReadError(Exception):
    """Base exception for statement reading errors."""
    pass


class UnsupportedStatementError(StatementReadError):
    """File is neither a CSV nor a PDF."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__("Please upload a PDF or CSV file")


class StatementContent(BaseModel):
    """A statement ready to send to the model."""

    upload: StatementUpload
    text: Optional[str] = Field(
        default=None,
        description="Decoded (and possibly truncated) CSV text"
    )
    data: Optional[bytes] = Field(
        default=None,
        description="Raw PDF bytes"
    )
    truncated: bool = Field(
        default=False,
        description="Whether the CSV text was cut to the character limit"
    )

    @property
    def statement_type(self) -> StatementType:
        return self.upload.statement_type


def detect_statement_type(filename: str) -> StatementType:
    """
    Decide the statement type from the file name.

    Raises:
        UnsupportedStatementError: For anything other than .csv / .pdf
    """
    suffix = PurePath(filename or "").suffix.lower()
    if suffix == ".csv":
        return StatementType.CSV
    if suffix == ".pdf":
        return StatementType.PDF
    raise UnsupportedStatementError(filename)


def decode_csv(data: bytes) -> str:
    """Decode CSV bytes as UTF-8, dropping a BOM and replacing bad bytes."""
    return data.decode("utf-8-sig", errors="replace")


def read_statement(
    filename: str,
    data: bytes,
    max_upload_bytes: Optional[int] = None,
    csv_max_chars: Optional[int] = None,
) -> StatementContent:
    """
    Validate an uploaded statement and prepare it for extraction.

    Args:
        filename: Original file name (used for type detection)
        data: Raw file bytes
        max_upload_bytes: Size limit, defaults to the app setting
        csv_max_chars: CSV truncation limit, defaults to the app setting

    Raises:
        UnsupportedStatementError: Wrong file type
        StatementReadError: Empty or oversized file
    """
    statement_type = detect_statement_type(filename)

    if max_upload_bytes is None or csv_max_chars is None:
        app_settings = get_settings().app
        if max_upload_bytes is None:
            max_upload_bytes = app_settings.max_upload_size_bytes
        if csv_max_chars is None:
            csv_max_chars = app_settings.csv_max_chars

    if not data:
        raise StatementReadError(f"The file {filename} is empty")
    if len(data) > max_upload_bytes:
        limit_mb = max_upload_bytes / (1024 * 1024)
        raise StatementReadError(
            f"The file {filename} is larger than the {limit_mb:.0f} MB limit"
        )

    upload = StatementUpload(
        filename=filename,
        file_size_bytes=len(data),
        statement_type=statement_type,
    )

    if statement_type == StatementType.CSV:
        text = decode_csv(data)
        if not text.strip():
            raise StatementReadError(f"The file {filename} is empty")
        return StatementContent(
            upload=upload,
            text=text[:csv_max_chars],
            truncated=len(text) > csv_max_chars,
        )

    return StatementContent(upload=upload, data=data)
