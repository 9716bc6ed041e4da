"""
CSV Export

Builds the downloadable CSV file from the previewed transactions.

Columns: Date, Description, Amount, Balance, Type.
A missing balance is written as an empty cell. Descriptions containing
commas, quotes or newlines are quoted with embedded quotes doubled.
"""

import csv
import io
from datetime import date
from typing import Iterable, Optional

from statement_parser.models.transaction import Transaction


EXPORT_HEADERS = ["Date", "Description", "Amount", "Balance", "Type"]
CSV_MIME_TYPE = "text/csv"


def transaction_to_row(transaction: Transaction) -> list:
    """One transaction as a list of cell values, in EXPORT_HEADERS order."""
    return [
        transaction.date,
        transaction.description,
        transaction.amount,
        transaction.balance if transaction.balance is not None else "",
        transaction.type.value,
    ]


def format_number(value: float) -> str:
    """Whole numbers without a trailing .0 (100, not 100.0); others as-is (-4.5)."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def transaction_to_csv_row(transaction: Transaction) -> list:
    """A transaction_to_row with the numbers written as text."""
    row = transaction_to_row(transaction)
    row[2] = format_number(transaction.amount)
    if transaction.balance is not None:
        row[3] = format_number(transaction.balance)
    return row


def transactions_to_csv(transactions: Iterable[Transaction]) -> str:
    """Render transactions (with header) as CSV text using \\n line endings."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for transaction in transactions:
        writer.writerow(transaction_to_csv_row(transaction))
    # No trailing newline after the last row
    return buffer.getvalue().rstrip("\n")


def transactions_to_csv_bytes(transactions: Iterable[Transaction]) -> bytes:
    return transactions_to_csv(transactions).encode("utf-8")


def export_filename(today: Optional[date] = None) -> str:
    """transactions_YYYY-MM-DD.csv"""
    today = today or date.today()
    return f"transactions_{today.isoformat()}.csv"
