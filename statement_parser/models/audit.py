"""
Audit Models for Bank Statement Parser

Each step of an upload, extraction or export leaves one structured event.
The events give:
1. Traceability of each upload from file to export
2. Debugging information when the model or Google misbehave
3. A record of what was sent where

DESIGN DECISION: Audit events carry no transaction data, only counts
and identifiers. Bank statements are personal data.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    What happened.

    Every step in the upload/extract/export pipeline has its own event type.
    """
    # Upload
    STATEMENT_UPLOADED = "statement_uploaded"
    STATEMENT_REJECTED = "statement_rejected"

    # Extraction
    EXTRACTION_STARTED = "extraction_started"
    EXTRACTION_COMPLETED = "extraction_completed"
    EXTRACTION_FAILED = "extraction_failed"
    VALIDATION_ISSUES_FOUND = "validation_issues_found"

    # Google account
    GOOGLE_SIGNED_IN = "google_signed_in"
    GOOGLE_SIGNED_OUT = "google_signed_out"

    # Export
    CSV_EXPORTED = "csv_exported"
    SHEETS_EXPORT_COMPLETED = "sheets_export_completed"
    SHEETS_EXPORT_FAILED = "sheets_export_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    One structured log record.
    Built through AuditEventBuilder rather than by hand.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'statement', 'extraction', 'spreadsheet')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one upload and its exports)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    One factory per event type, so callers never pick severities or entity types.

    Usage:
        event = AuditEventBuilder.statement_uploaded(upload_id, filename, ...)
        event = AuditEventBuilder.csv_exported(filename, row_count, correlation_id)
    """

    @staticmethod
    def statement_uploaded(
        upload_id: UUID,
        filename: str,
        file_size: int,
        statement_type: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATEMENT_UPLOADED,
            entity_type="statement",
            entity_id=str(upload_id),
            correlation_id=correlation_id,
            description=f"Statement uploaded: {filename}",
            details={
                "filename": filename,
                "file_size_bytes": file_size,
                "statement_type": statement_type,
            },
            is_user_action=True,
        )

    @staticmethod
    def statement_rejected(
        filename: str,
        reason: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATEMENT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="statement",
            correlation_id=correlation_id,
            description=f"Statement rejected: {filename}",
            details={
                "filename": filename,
            },
            error_message=reason,
        )

    @staticmethod
    def extraction_started(
        upload_id: UUID,
        model_name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRACTION_STARTED,
            entity_type="statement",
            entity_id=str(upload_id),
            correlation_id=correlation_id,
            description=f"Extraction started with {model_name}",
            details={
                "model_name": model_name,
            },
        )

    @staticmethod
    def extraction_completed(
        extraction_id: UUID,
        transaction_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRACTION_COMPLETED,
            entity_type="extraction",
            entity_id=str(extraction_id),
            correlation_id=correlation_id,
            description=f"Extraction completed: {transaction_count} transactions",
            details={
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def extraction_failed(
        upload_id: UUID,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTRACTION_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="statement",
            entity_id=str(upload_id),
            correlation_id=correlation_id,
            description="Extraction failed",
            error_message=error_message,
        )

    @staticmethod
    def validation_issues_found(
        extraction_id: UUID,
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_ISSUES_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="extraction",
            entity_id=str(extraction_id),
            correlation_id=correlation_id,
            description=f"Review found {len(issues)} issues",
            details={
                "issues": issues,
            },
        )

    @staticmethod
    def google_signed_in(
        email: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOOGLE_SIGNED_IN,
            entity_type="google_account",
            entity_id=email,
            description="User connected Google account",
            is_user_action=True,
        )

    @staticmethod
    def google_signed_out(
        email: Optional[str],
        reason: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOOGLE_SIGNED_OUT,
            entity_type="google_account",
            entity_id=email,
            description="Google account disconnected",
            details={
                "reason": reason or "User signed out",
            },
            is_user_action=reason is None,
        )

    @staticmethod
    def csv_exported(
        filename: str,
        row_count: int,
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CSV_EXPORTED,
            entity_type="csv",
            entity_id=filename,
            correlation_id=correlation_id,
            description=f"CSV prepared: {filename} ({row_count} rows)",
            details={
                "row_count": row_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def sheets_export_completed(
        spreadsheet_id: str,
        row_count: int,
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHEETS_EXPORT_COMPLETED,
            entity_type="spreadsheet",
            entity_id=spreadsheet_id,
            correlation_id=correlation_id,
            description=f"Exported {row_count} transactions to Google Sheets",
            details={
                "row_count": row_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def sheets_export_failed(
        error_message: str,
        auth_failure: bool,
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHEETS_EXPORT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="spreadsheet",
            correlation_id=correlation_id,
            description="Google Sheets export failed",
            error_message=error_message,
            details={
                "auth_failure": auth_failure,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
