"""Validation package."""

from statement_parser.validation.validator import TransactionValidator

__all__ = ["TransactionValidator"]
