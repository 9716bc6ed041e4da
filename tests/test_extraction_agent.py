"""
Tests for the extraction agent.

The Gemini model is replaced by a mock; no request leaves the test.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, PropertyMock

import pytest

from statement_parser.agents import (
    ExtractionFailedError,
    ResponseParseError,
    StatementExtractionAgent,
)
from statement_parser.agents.extraction_agent import PDF_MIME_TYPE
from statement_parser.config import GeminiSettings
from statement_parser.models.transaction import StatementType, TransactionType
from statement_parser.services.statement_reader import read_statement


def make_agent(text=None, error=None):
    response = MagicMock()
    response.text = text
    model = MagicMock()
    if error is not None:
        model.generate_content_async = AsyncMock(side_effect=error)
    else:
        model.generate_content_async = AsyncMock(return_value=response)
    settings = GeminiSettings(api_key="test", model_name="gemini-test")
    return StatementExtractionAgent(settings=settings, model=model), model


@pytest.fixture
def csv_content():
    return read_statement("march.csv", b"Date,Details,Amount\n2024-03-01,Coffee,-4.50\n")


@pytest.fixture
def pdf_content():
    return read_statement("march.pdf", b"%PDF-1.4 statement bytes")


class TestBuildContents:

    def test_csv_is_embedded_in_prompt(self, csv_content):
        agent, _ = make_agent()
        contents = agent.build_contents(csv_content)
        assert len(contents) == 1
        assert "2024-03-01,Coffee,-4.50" in contents[0]

    def test_pdf_is_sent_as_inline_document(self, pdf_content):
        agent, _ = make_agent()
        contents = agent.build_contents(pdf_content)
        assert contents[0] == {"mime_type": PDF_MIME_TYPE, "data": b"%PDF-1.4 statement bytes"}
        assert "JSON array" in contents[1]


class TestExtract:

    def test_extracts_transactions(self, csv_content):
        agent, model = make_agent(
            '```json\n[{"date": "2024-03-01", "description": "Coffee", '
            '"amount": -4.5, "balance": null, "type": "debit"}]\n```'
        )

        result = asyncio.run(agent.extract(csv_content))

        assert result.statement_type == StatementType.CSV
        assert result.model_name == "gemini-test"
        assert result.transaction_count == 1
        assert result.transactions[0].type == TransactionType.DEBIT
        assert result.raw_response.startswith("```json")
        model.generate_content_async.assert_awaited_once()

    def test_request_passes_timeout(self, pdf_content):
        agent, model = make_agent("[]")
        asyncio.run(agent.extract(pdf_content))
        _, kwargs = model.generate_content_async.call_args
        assert kwargs["request_options"] == {"timeout": 120}

    def test_request_failure(self, csv_content):
        agent, _ = make_agent(error=RuntimeError("quota exceeded"))
        with pytest.raises(ExtractionFailedError, match="AI request failed: quota exceeded"):
            asyncio.run(agent.extract(csv_content))

    def test_empty_response(self, csv_content):
        agent, _ = make_agent("   ")
        with pytest.raises(ExtractionFailedError, match="No response from AI"):
            asyncio.run(agent.extract(csv_content))

    def test_blocked_response(self, csv_content):
        """A response without parts raises ValueError on .text."""
        agent, model = make_agent()
        response = MagicMock()
        type(response).text = PropertyMock(side_effect=ValueError("no parts"))
        model.generate_content_async = AsyncMock(return_value=response)

        with pytest.raises(ExtractionFailedError, match="No response from AI"):
            asyncio.run(agent.extract(csv_content))

    def test_unparseable_response(self, csv_content):
        agent, _ = make_agent("Sorry, I cannot read this statement.")
        with pytest.raises(ResponseParseError):
            asyncio.run(agent.extract(csv_content))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
