"""
Audit Logger

DESIGN DECISION: Audit events are written by the flows only.
Every event of one upload shares a correlation ID, so a single grep
shows the file, the extraction and any exports made from it.

The audit logger:
- Writes structured JSON through structlog
- Never raises - a logging failure must not break the main flow
- Has no persistent backend; the app has no storage layer
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from statement_parser.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# JSON lines on the stdlib root logger
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(debug: bool = False) -> None:
    """Route structlog output through the stdlib root logger."""
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


class AuditLogger:
    """
    Writes AuditEvents to the structured log.

    Each helper builds an AuditEvent and logs it at the level
    matching its severity.
    """

    def __init__(self):
        self._logger = structlog.get_logger("statement_parser.audit")

    def log(self, event: AuditEvent) -> AuditEvent:
        """
        Log an audit event.

        Returns the event so callers can keep its ID.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Audit output must never take the request down with it
            logging.getLogger(__name__).warning(
                "Failed to write audit event %s: %s", event.event_id, e
            )

        return event

    def log_statement_uploaded(
        self,
        upload_id: UUID,
        filename: str,
        file_size: int,
        statement_type: str,
        correlation_id: UUID,
    ) -> None:
        """Log statement upload event."""
        self.log(AuditEventBuilder.statement_uploaded(
            upload_id=upload_id,
            filename=filename,
            file_size=file_size,
            statement_type=statement_type,
            correlation_id=correlation_id,
        ))

    def log_statement_rejected(
        self,
        filename: str,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.statement_rejected(
            filename=filename,
            reason=reason,
            correlation_id=correlation_id,
        ))

    def log_extraction_started(
        self,
        upload_id: UUID,
        model_name: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.extraction_started(
            upload_id=upload_id,
            model_name=model_name,
            correlation_id=correlation_id,
        ))

    def log_extraction_completed(
        self,
        extraction_id: UUID,
        transaction_count: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.extraction_completed(
            extraction_id=extraction_id,
            transaction_count=transaction_count,
            correlation_id=correlation_id,
        ))

    def log_extraction_failed(
        self,
        upload_id: UUID,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.extraction_failed(
            upload_id=upload_id,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_validation_issues(
        self,
        extraction_id: UUID,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.validation_issues_found(
            extraction_id=extraction_id,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_google_signed_in(self, email: Optional[str]) -> None:
        self.log(AuditEventBuilder.google_signed_in(email=email))

    def log_google_signed_out(
        self,
        email: Optional[str],
        reason: Optional[str] = None,
    ) -> None:
        self.log(AuditEventBuilder.google_signed_out(email=email, reason=reason))

    def log_csv_exported(
        self,
        filename: str,
        row_count: int,
        correlation_id: Optional[UUID],
    ) -> None:
        self.log(AuditEventBuilder.csv_exported(
            filename=filename,
            row_count=row_count,
            correlation_id=correlation_id,
        ))

    def log_sheets_export_completed(
        self,
        spreadsheet_id: str,
        row_count: int,
        correlation_id: Optional[UUID],
    ) -> None:
        self.log(AuditEventBuilder.sheets_export_completed(
            spreadsheet_id=spreadsheet_id,
            row_count=row_count,
            correlation_id=correlation_id,
        ))

    def log_sheets_export_failed(
        self,
        error_message: str,
        auth_failure: bool,
        correlation_id: Optional[UUID],
    ) -> None:
        self.log(AuditEventBuilder.sheets_export_failed(
            error_message=error_message,
            auth_failure=auth_failure,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> None:
        """Log external service error."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    New correlation ID, one per upload.

    Every flow call for that upload and its exports takes the same ID.
    """
    return uuid4()
