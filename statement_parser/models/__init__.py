"""
Data Models Package

This package contains all Pydantic models used in the Bank Statement Parser.
All data flowing through the system must conform to these schemas.
"""

from statement_parser.models.transaction import (
    ExtractionResult,
    GoogleUser,
    SheetsExportResult,
    StatementType,
    StatementUpload,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from statement_parser.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "ExtractionResult",
    "GoogleUser",
    "SheetsExportResult",
    "StatementType",
    "StatementUpload",
    "Transaction",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
