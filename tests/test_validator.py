"""Tests for the review checks shown in the preview."""

import pytest

from statement_parser.models.transaction import (
    ExtractionResult,
    StatementType,
    Transaction,
    TransactionType,
)
from statement_parser.validation import TransactionValidator


def make_result(transactions):
    return ExtractionResult(
        statement_type=StatementType.CSV,
        model_name="gemini-test",
        transactions=transactions,
    )


def make_transaction(**overrides):
    values = {
        "date": "2024-03-01",
        "description": "Coffee",
        "amount": -4.5,
        "balance": None,
        "type": TransactionType.DEBIT,
    }
    values.update(overrides)
    return Transaction(**values)


@pytest.fixture
def validator():
    return TransactionValidator()


class TestTransactionValidator:

    def test_clean_result(self, validator, sample_transactions):
        result = validator.validate(make_result(sample_transactions))
        assert result.is_clean
        assert validator.get_user_friendly_summary(result) == "All transactions look complete."

    def test_no_transactions_is_error(self, validator):
        result = validator.validate(make_result([]))
        assert result.has_errors
        assert validator.get_user_friendly_summary(result) == (
            "No transactions were found in this statement"
        )

    def test_unknown_date(self, validator):
        result = validator.validate(make_result([make_transaction(date="Unknown")]))
        assert len(result.issues) == 1
        issue = result.issues[0]
        assert issue.field == "date"
        assert issue.issue_type == "missing"
        assert issue.row_index == 0
        assert issue.message == "Row 1: the date could not be read"

    @pytest.mark.parametrize("value", [
        "03/01/2024", "1 Mar 2024", "2024-13-01", "20240301", "2024-W03-1", "2024-03-01T10:00",
    ])
    def test_non_iso_date(self, validator, value):
        result = validator.validate(make_result([make_transaction(date=value)]))
        assert [i.issue_type for i in result.issues] == ["invalid_format"]

    def test_zero_amount(self, validator):
        result = validator.validate(make_result([
            make_transaction(),
            make_transaction(amount=0, type=TransactionType.CREDIT),
        ]))
        assert len(result.issues) == 1
        assert result.issues[0].message == "Row 2: amount is zero"

    def test_sign_mismatch(self, validator):
        result = validator.validate(make_result([make_transaction(amount=12.5)]))
        assert result.issues[0].issue_type == "sign_mismatch"
        assert result.issues[0].message == "Row 1: marked as debit but the amount is +12.50"

    def test_warnings_do_not_block(self, validator):
        """Warnings only ask for a second look; nothing is changed."""
        transactions = [make_transaction(date="Unknown"), make_transaction(amount=3)]
        result = validator.validate(make_result(transactions))

        assert not result.has_errors
        assert result.warning_count == 2
        assert validator.get_user_friendly_summary(result) == "2 row(s) may need a second look."
        assert transactions[0].date == "Unknown"
        assert transactions[1].amount == 3
