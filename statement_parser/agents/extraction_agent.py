"""
Statement Extraction Agent

DESIGN DECISION: All reading of the statement is delegated to Gemini.
The agent's job is narrow:
1. Build the prompt for the statement type
2. Make exactly one request to the model
3. Hand the answer to the response parser

CRITICAL BOUNDARIES:
- CAN: Send the statement to the model and normalize what comes back
- CANNOT: Invent transactions when the model fails
- CANNOT: Retry silently - a failed extraction is reported to the user

The LLM is a READER, not a CALCULATOR.
Totals shown in the UI are computed from the parsed rows, never asked of the model.
"""

from typing import Any, Optional

import google.generativeai as genai

from statement_parser.agents.prompts import (
    get_csv_extraction_prompt,
    get_pdf_extraction_prompt,
)
from statement_parser.agents.response_parser import ExtractionError, parse_transactions
from statement_parser.config import GeminiSettings, get_settings
from statement_parser.models.transaction import ExtractionResult, StatementType
from statement_parser.services.statement_reader import StatementContent


PDF_MIME_TYPE = "application/pdf"


class ExtractionFailedError(ExtractionError):
    """The model request failed or returned nothing usable."""
    pass


class StatementExtractionAgent:
    """
    AI agent that turns a statement into transactions.

    RESPONSIBILITIES:
    - Choose the CSV or PDF prompt
    - Call Gemini once per statement
    - Return normalized transactions

    BOUNDARIES:
    - NEVER fabricates rows
    - NEVER swallows model errors
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
    ):
        self._settings = settings or get_settings().gemini
        if model is None:
            self._configure_genai()
        else:
            self._model = model

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @property
    def model_name(self) -> str:
        return self._settings.model_name

    def build_contents(self, content: StatementContent) -> list:
        """
        Build the request contents for a statement.

        PDF: the document as an inline part followed by the instructions.
        CSV: a single text prompt with the CSV embedded.
        """
        if content.statement_type == StatementType.PDF:
            if not content.data:
                raise ExtractionFailedError("PDF statement has no content")
            return [
                {"mime_type": PDF_MIME_TYPE, "data": content.data},
                get_pdf_extraction_prompt(),
            ]

        if content.text is None:
            raise ExtractionFailedError("CSV statement has no content")
        return [get_csv_extraction_prompt(content.text)]

    async def _request(self, contents: list) -> str:
        """Send one request and return the answer text."""
        try:
            response = await self._model.generate_content_async(
                contents,
                request_options={"timeout": self._settings.request_timeout_seconds},
            )
        except Exception as e:
            raise ExtractionFailedError(f"AI request failed: {e}") from e

        # .text raises ValueError when the answer was blocked or has no parts
        try:
            text = response.text
        except ValueError as e:
            raise ExtractionFailedError("No response from AI") from e

        if not text or not text.strip():
            raise ExtractionFailedError("No response from AI")
        return text.strip()

    async def extract(self, content: StatementContent) -> ExtractionResult:
        """
        Extract transactions from a statement.

        Raises:
            ExtractionFailedError: The request failed or came back empty
            ResponseParseError: The answer held no parseable JSON array
        """
        contents = self.build_contents(content)
        text = await self._request(contents)

        transactions = parse_transactions(text)

        return ExtractionResult(
            statement_type=content.statement_type,
            model_name=self.model_name,
            transactions=transactions,
            raw_response=text,
        )
