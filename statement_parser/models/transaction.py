"""
Core Data Models for Bank Statement Parser

These models define the schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Be serializable for export and logging
3. Keep the AI's output separate from what we show the user

DESIGN DECISION: A Transaction always has every field populated.
Missing values from the model are replaced by explicit placeholders
("Unknown", "No description", 0) before a Transaction is built, so the
preview and both exports never have to deal with gaps.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class StatementType(str, Enum):
    """Statement file types we accept."""
    CSV = "csv"
    PDF = "pdf"


class TransactionType(str, Enum):
    """Direction of money movement."""
    DEBIT = "debit"    # Money out
    CREDIT = "credit"  # Money in


# =============================================================================
# TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    A single normalized transaction.

    Amount sign convention: negative for money OUT, positive for money IN.
    """
    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=False)

    date: str = Field(
        ...,
        min_length=1,
        description="Transaction date, YYYY-MM-DD when the model could tell"
    )
    description: str = Field(
        ...,
        min_length=1,
        description="Transaction description / merchant"
    )
    amount: float = Field(
        ...,
        description="Signed amount (negative = money out)"
    )
    balance: Optional[float] = Field(
        default=None,
        description="Running balance after the transaction, if shown"
    )
    type: TransactionType = Field(
        ...,
        description="debit or credit"
    )

    @property
    def is_debit(self) -> bool:
        return self.type == TransactionType.DEBIT

    @property
    def display_amount(self) -> str:
        """Absolute amount with two decimals (sign is shown by colour)."""
        return f"{abs(self.amount):.2f}"

    @property
    def display_balance(self) -> str:
        if self.balance is None:
            return "-"
        return f"{self.balance:.2f}"


# =============================================================================
# UPLOAD / EXTRACTION MODELS
# =============================================================================

class StatementUpload(BaseModel):
    """Represents an uploaded statement before extraction."""

    upload_id: UUID = Field(
        default_factory=uuid4,
        description="Unique upload identifier"
    )
    uploaded_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    filename: str = Field(..., min_length=1)
    file_size_bytes: int = Field(ge=0)
    statement_type: StatementType


class ExtractionResult(BaseModel):
    """
    Transactions extracted from one statement.

    CRITICAL: This is what the model proposed, after field defaulting.
    It is shown to the user before any export.
    """

    extraction_id: UUID = Field(
        default_factory=uuid4,
        description="Unique ID for this extraction attempt"
    )
    extracted_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When extraction was performed"
    )
    statement_type: StatementType
    model_name: str = Field(
        ...,
        description="Model that produced the extraction"
    )
    transactions: list[Transaction] = Field(default_factory=list)

    # Raw model output for debugging
    raw_response: Optional[str] = Field(
        default=None,
        description="Raw response text from the model"
    )

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def total_in(self) -> float:
        """Sum of positive amounts."""
        return round(sum(t.amount for t in self.transactions if t.amount > 0), 2)

    @property
    def total_out(self) -> float:
        """Sum of negative amounts, as a positive number."""
        return round(-sum(t.amount for t in self.transactions if t.amount < 0), 2)

    @property
    def net_change(self) -> float:
        return round(self.total_in - self.total_out, 2)


# =============================================================================
# GOOGLE MODELS
# =============================================================================

class GoogleUser(BaseModel):
    """Profile of the signed-in Google user (from the userinfo endpoint)."""
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.email or self.name or "Signed in"


class SheetsExportResult(BaseModel):
    """Result of exporting transactions to a new Google Sheet."""

    spreadsheet_id: str = Field(..., min_length=1)
    spreadsheet_url: str
    title: str
    row_count: int = Field(
        ge=0,
        description="Number of transaction rows written (header excluded)"
    )
    exported_at: datetime = Field(
        default_factory=datetime.utcnow
    )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single review issue found in the extracted transactions."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    row_index: Optional[int] = Field(
        default=None,
        ge=0,
        description="Index of the affected transaction, if any"
    )

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Issue message cannot be blank")
        return v


class ValidationResult(BaseModel):
    """
    Review checks run on an extraction.

    Issues never block the preview or the exports; they are shown
    so the user knows which rows to double-check.
    """

    extraction_id: UUID = Field(
        ...,
        description="ID of the extraction being validated"
    )
    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All issues found"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "warning")

    @property
    def is_clean(self) -> bool:
        return not self.issues
