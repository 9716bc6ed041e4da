"""
Review Checks for Extracted Transactions

The model's output is shown to the user as-is (after field defaulting).
These checks point at rows that deserve a second look before export:

- No transactions at all
- Dates the model could not read ("Unknown") or did not give as YYYY-MM-DD
- Zero amounts (usually an amount the model could not parse)
- A debit with a positive amount, or a credit with a negative one

IMPORTANT: Validation NEVER fixes anything.
It reports issues; the exports carry exactly what the preview shows.
"""

import re
from datetime import date

from statement_parser.agents.response_parser import UNKNOWN_DATE
from statement_parser.models.transaction import (
    ExtractionResult,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _is_iso_date(value: str) -> bool:
    # fromisoformat alone also accepts week dates and compact forms
    if not _ISO_DATE.fullmatch(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


class TransactionValidator:
    """Runs review checks over an extraction result."""

    def _check_date(self, index: int, transaction: Transaction) -> list[ValidationIssue]:
        if transaction.date == UNKNOWN_DATE:
            return [ValidationIssue(
                field="date",
                issue_type="missing",
                message=f"Row {index + 1}: the date could not be read",
                severity="warning",
                row_index=index,
            )]
        if not _is_iso_date(transaction.date):
            return [ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=f"Row {index + 1}: date '{transaction.date}' is not in YYYY-MM-DD format",
                severity="warning",
                row_index=index,
            )]
        return []

    def _check_amount(self, index: int, transaction: Transaction) -> list[ValidationIssue]:
        if transaction.amount == 0:
            return [ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Row {index + 1}: amount is zero",
                severity="warning",
                row_index=index,
            )]

        mismatch = (
            (transaction.type == TransactionType.DEBIT and transaction.amount > 0)
            or (transaction.type == TransactionType.CREDIT and transaction.amount < 0)
        )
        if mismatch:
            return [ValidationIssue(
                field="type",
                issue_type="sign_mismatch",
                message=(
                    f"Row {index + 1}: marked as {transaction.type.value} "
                    f"but the amount is {transaction.amount:+.2f}"
                ),
                severity="warning",
                row_index=index,
            )]
        return []

    def validate(self, result: ExtractionResult) -> ValidationResult:
        issues = []

        if not result.transactions:
            issues.append(ValidationIssue(
                field="transactions",
                issue_type="missing",
                message="No transactions were found in this statement",
                severity="error",
            ))

        for index, transaction in enumerate(result.transactions):
            issues.extend(self._check_date(index, transaction))
            issues.extend(self._check_amount(index, transaction))

        return ValidationResult(
            extraction_id=result.extraction_id,
            issues=issues,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Short message for the preview header."""
        if result.is_clean:
            return "All transactions look complete."
        if result.has_errors:
            return result.issues[0].message
        return f"{result.warning_count} row(s) may need a second look."
