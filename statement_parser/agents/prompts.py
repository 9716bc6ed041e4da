"""Extraction prompts for bank statements."""

TRANSACTION_FORMAT = """[
  {
    "date": "YYYY-MM-DD",
    "description": "transaction description",
    "amount": -123.45,
    "balance": 1000.00,
    "type": "debit"
  }
]"""


def get_pdf_extraction_prompt() -> str:
    """Prompt sent alongside the PDF document part."""
    return f"""Extract ALL transactions from this bank statement. Return ONLY a JSON array.

Format:
{TRANSACTION_FORMAT}

Rules:
- Negative for money OUT
- Positive for money IN
- Return ONLY JSON array"""


def get_csv_extraction_prompt(csv_text: str) -> str:
    """Prompt with the CSV statement embedded in it."""
    csv_format = TRANSACTION_FORMAT.replace("transaction description", "merchant")
    return f"""Parse this CSV bank statement. Return ONLY a JSON array.

CSV Data:
{csv_text}

Format:
{csv_format}

Return ONLY JSON array"""
