"""
Main Orchestrator for Bank Statement Parser

This module ties together all the components and defines the
end-to-end flows for:
1. Parsing (file -> read -> extract with Gemini -> review checks)
2. Google sign-in (consent URL -> code exchange -> profile)
3. Export (transactions -> CSV download, or -> new Google Sheet)

DESIGN DECISION: The orchestrator is the only place that audits.
Services raise; flows log what happened and re-raise so the page
can show the error.
"""

from datetime import date
from typing import Any, Optional, Sequence
from uuid import UUID

import structlog
from pydantic import ValidationError

from statement_parser.agents import (
    ExtractionError,
    ExtractionFailedError,
    StatementExtractionAgent,
)
from statement_parser.audit import AuditLogger, configure_logging, create_correlation_id
from statement_parser.config import get_settings
from statement_parser.models.transaction import (
    ExtractionResult,
    GoogleUser,
    SheetsExportResult,
    Transaction,
    ValidationResult,
)
from statement_parser.services.export import export_filename, transactions_to_csv_bytes
from statement_parser.services.google import (
    GoogleOAuthService,
    GoogleSheetsExporter,
    SheetsAuthError,
    SheetsExportError,
)
from statement_parser.services.statement_reader import StatementReadError, read_statement
from statement_parser.validation import TransactionValidator


logger = structlog.get_logger(__name__)


class StatementParseFlow:
    """
    Orchestrates the parse flow.

    Flow:
    1. Read -> Classify the file, decode/truncate CSV
    2. Extract -> One Gemini request, parse the JSON array
    3. Review -> Non-blocking checks for the preview

    Nothing is exported here; exporting is an explicit user action.
    """

    def __init__(
        self,
        extraction_agent: Optional[StatementExtractionAgent] = None,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        # The agent needs GEMINI_API_KEY; build it on first use so the
        # page can still render (and show the settings panel) without it
        self._extraction_agent = extraction_agent
        self._validator = validator or TransactionValidator()
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def extraction_agent(self) -> StatementExtractionAgent:
        """
        Raises:
            ExtractionFailedError: Gemini settings are missing or invalid
        """
        if self._extraction_agent is None:
            try:
                self._extraction_agent = StatementExtractionAgent()
            except ValidationError as e:
                fields = ", ".join(
                    "GEMINI_" + str(error["loc"][0]).upper()
                    for error in e.errors()
                    if error.get("loc")
                )
                raise ExtractionFailedError(
                    f"Gemini is not configured: check {fields}"
                ) from e
        return self._extraction_agent

    async def process_statement(
        self,
        filename: str,
        data: bytes,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[ExtractionResult, ValidationResult]:
        """
        Extract and review the transactions in an uploaded statement.

        Returns:
            (extraction_result, validation_result)

        Raises:
            StatementReadError: Unsupported, empty or oversized file
            ExtractionError: The model failed or its answer was unusable
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            content = read_statement(filename, data)
        except StatementReadError as e:
            self._audit_logger.log_statement_rejected(
                filename=filename,
                reason=str(e),
                correlation_id=correlation_id,
            )
            raise

        upload = content.upload
        self._audit_logger.log_statement_uploaded(
            upload_id=upload.upload_id,
            filename=upload.filename,
            file_size=upload.file_size_bytes,
            statement_type=upload.statement_type.value,
            correlation_id=correlation_id,
        )
        if content.truncated:
            logger.warning(
                "csv_truncated",
                filename=filename,
                correlation_id=str(correlation_id),
            )

        try:
            agent = self.extraction_agent
            self._audit_logger.log_extraction_started(
                upload_id=upload.upload_id,
                model_name=agent.model_name,
                correlation_id=correlation_id,
            )
            result = await agent.extract(content)
        except ExtractionError as e:
            self._audit_logger.log_extraction_failed(
                upload_id=upload.upload_id,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        self._audit_logger.log_extraction_completed(
            extraction_id=result.extraction_id,
            transaction_count=result.transaction_count,
            correlation_id=correlation_id,
        )

        validation = self._validator.validate(result)
        if validation.issues:
            self._audit_logger.log_validation_issues(
                extraction_id=result.extraction_id,
                issues=[
                    {"field": i.field, "type": i.issue_type, "row": i.row_index}
                    for i in validation.issues
                ],
                correlation_id=correlation_id,
            )

        return result, validation

    def summarize_validation(self, validation: ValidationResult) -> str:
        return self._validator.get_user_friendly_summary(validation)


class GoogleSignInFlow:
    """
    Orchestrates Google sign-in and sign-out.

    The resulting token dict is kept by the caller (the user's session).
    """

    def __init__(
        self,
        oauth_service: Optional[GoogleOAuthService] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._oauth_service = oauth_service or GoogleOAuthService()
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def oauth_service(self) -> GoogleOAuthService:
        return self._oauth_service

    def authorization_url(self) -> str:
        url, _ = self._oauth_service.authorization_url()
        return url

    def complete_sign_in(
        self,
        code: str,
        state: Optional[str] = None,
    ) -> tuple[dict, GoogleUser]:
        """
        Finish the redirect: exchange the code and load the profile.

        Returns:
            (token_dict, user)

        Raises:
            GoogleAuthError: If either step fails
        """
        credentials = self._oauth_service.exchange_code(code, state=state)
        user = self._oauth_service.fetch_user_info(credentials)
        self._audit_logger.log_google_signed_in(email=user.email)
        return self._oauth_service.credentials_to_dict(credentials), user

    def credentials(self, token: dict) -> Any:
        return self._oauth_service.credentials_from_dict(token)

    def sign_out(
        self,
        user: Optional[GoogleUser],
        reason: Optional[str] = None,
    ) -> None:
        self._audit_logger.log_google_signed_out(
            email=user.email if user else None,
            reason=reason,
        )


class ExportFlow:
    """
    Orchestrates both export paths.

    CSV export never leaves the machine. Sheets export runs with the
    signed-in user's credentials only.
    """

    def __init__(
        self,
        sheets_exporter: Optional[GoogleSheetsExporter] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._sheets_exporter = sheets_exporter or GoogleSheetsExporter()
        self._audit_logger = audit_logger or AuditLogger()

    def prepare_csv(
        self,
        transactions: Sequence[Transaction],
        today: Optional[date] = None,
    ) -> tuple[str, bytes]:
        """
        Build the CSV download.

        Streamlit needs the file contents before the button is clicked,
        so building and recording the download are separate steps.

        Returns:
            (filename, csv_bytes)
        """
        return export_filename(today), transactions_to_csv_bytes(transactions)

    def record_csv_download(
        self,
        filename: str,
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self._audit_logger.log_csv_exported(
            filename=filename,
            row_count=row_count,
            correlation_id=correlation_id,
        )

    def export_to_sheets(
        self,
        transactions: Sequence[Transaction],
        credentials: Any,
        correlation_id: Optional[UUID] = None,
        today: Optional[date] = None,
    ) -> SheetsExportResult:
        """
        Create a new Google Sheet holding the transactions.

        Raises:
            SheetsAuthError: Creation failed; the caller should sign the user out
            SheetsExportError: Anything else that stopped the export
        """
        try:
            result = self._sheets_exporter.export(transactions, credentials, today=today)
        except SheetsExportError as e:
            self._audit_logger.log_sheets_export_failed(
                error_message=str(e),
                auth_failure=isinstance(e, SheetsAuthError),
                correlation_id=correlation_id,
            )
            if e.__cause__ is not None:
                self._audit_logger.log_external_service_error(
                    service="google_sheets",
                    error_message=str(e.__cause__),
                    correlation_id=correlation_id,
                )
            raise

        self._audit_logger.log_sheets_export_completed(
            spreadsheet_id=result.spreadsheet_id,
            row_count=result.row_count,
            correlation_id=correlation_id,
        )
        return result


def create_app_components() -> tuple[StatementParseFlow, ExportFlow, Optional[GoogleSignInFlow]]:
    """
    Factory function to create all application components.

    Returns:
        (parse_flow, export_flow, sign_in_flow)

    sign_in_flow is None when Google OAuth is not configured; the page
    then offers CSV download only.
    """
    settings = get_settings()
    configure_logging(debug=settings.app.debug_mode)

    audit_logger = AuditLogger()

    sign_in_flow = None
    try:
        sign_in_flow = GoogleSignInFlow(
            oauth_service=GoogleOAuthService(settings.google_oauth),
            audit_logger=audit_logger,
        )
    except Exception as e:
        # OAuth not configured - continue with CSV export only
        audit_logger.log_error(
            error_type="google_oauth_not_configured",
            error_message=str(e),
        )

    parse_flow = StatementParseFlow(audit_logger=audit_logger)
    export_flow = ExportFlow(
        sheets_exporter=GoogleSheetsExporter(settings.app),
        audit_logger=audit_logger,
    )

    return parse_flow, export_flow, sign_in_flow
