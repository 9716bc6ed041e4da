"""AI Agents package."""

from statement_parser.agents.extraction_agent import (
    ExtractionFailedError,
    StatementExtractionAgent,
)
from statement_parser.agents.response_parser import (
    ExtractionError,
    ResponseParseError,
    parse_transactions,
)

__all__ = [
    "ExtractionError",
    "ExtractionFailedError",
    "ResponseParseError",
    "StatementExtractionAgent",
    "parse_transactions",
]
