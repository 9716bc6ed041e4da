"""
Post-processing of the model's answer.

The model is asked for a bare JSON array but often wraps it in
markdown fences or surrounds it with prose. Everything here is
deterministic text wrangling: find the array, parse it, and give
every transaction a complete set of fields.

Field defaults:
- date        -> "Unknown"
- description -> "No description"
- amount      -> 0 when missing or unparseable
- balance     -> None when missing or unparseable
- type        -> derived from the sign of the amount unless the model
                 said "debit" or "credit"
"""

import json
import math
import re
from typing import Any, Optional

import structlog

from statement_parser.models.transaction import Transaction, TransactionType


logger = structlog.get_logger(__name__)

UNKNOWN_DATE = "Unknown"
NO_DESCRIPTION = "No description"

_JSON_FENCE = re.compile(r"```json\n?", re.IGNORECASE)
_BARE_FENCE = re.compile(r"```\n?")
_JSON_ARRAY = re.compile(r"\[\s*\{.*\}\s*\]", re.DOTALL)
# Currency symbols, thousands separators and whitespace inside amounts
_NUMBER_NOISE = re.compile(r"[\s,$£€₹]")


class ExtractionError(Exception):
    """Base exception for extraction errors."""
    pass


class ResponseParseError(ExtractionError):
    """The model's answer did not contain a usable JSON array."""
    pass


def strip_code_fences(text: str) -> str:
    """Remove ```json / ``` markdown fences from the model's answer."""
    text = text.strip()
    text = _JSON_FENCE.sub("", text)
    text = _BARE_FENCE.sub("", text)
    return text.strip()


def extract_json_array(text: str) -> str:
    """
    Pull the outermost `[ {...} ]` span out of surrounding prose.

    Returns the text unchanged when no such span exists, so an empty
    array or a malformed answer reaches json.loads as-is.
    """
    match = _JSON_ARRAY.search(text)
    if match:
        return match.group(0)
    return text


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a model-provided number.

    Accepts ints, floats and strings such as "-1,234.56", "$12.00"
    or "(45.10)" (accounting negative). Returns None for anything else.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        negative = text.startswith("(") and text.endswith(")")
        text = _NUMBER_NOISE.sub("", text.strip("()"))
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        if negative:
            number = -abs(number)
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _text_or_default(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _resolve_type(raw_type: Any, amount: float) -> TransactionType:
    if isinstance(raw_type, str):
        try:
            return TransactionType(raw_type.strip().lower())
        except ValueError:
            pass
    return TransactionType.DEBIT if amount < 0 else TransactionType.CREDIT


def normalize_transaction(raw: dict) -> Transaction:
    """Apply field defaults to one transaction object from the model."""
    amount = parse_number(raw.get("amount"))
    if amount is None:
        amount = 0.0

    return Transaction(
        date=_text_or_default(raw.get("date"), UNKNOWN_DATE),
        description=_text_or_default(raw.get("description"), NO_DESCRIPTION),
        amount=amount,
        balance=parse_number(raw.get("balance")),
        type=_resolve_type(raw.get("type"), amount),
    )


def parse_transactions(text: str) -> list[Transaction]:
    """
    Turn the model's raw answer into normalized transactions.

    Raises:
        ResponseParseError: If no JSON array can be parsed from the text
    """
    cleaned = extract_json_array(strip_code_fences(text))

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ResponseParseError(
            f"Could not parse transactions from AI response: {e.msg}"
        ) from e

    if not isinstance(data, list):
        raise ResponseParseError(
            f"Expected a JSON array of transactions, got {type(data).__name__}"
        )

    transactions = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning(
                "skipping_non_object_entry",
                index=index,
                entry_type=type(item).__name__,
            )
            continue
        transactions.append(normalize_transaction(item))

    return transactions
