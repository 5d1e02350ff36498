"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    TransactionFileError,
    FileFormatError,
    TransactionParseError,
    MissingColumnsError,
    ConfigurationError,
    ExportError,
    ReportGenerationError,
)
from .logging_config import setup_logging

__all__ = [
    "ReconciliationError",
    "TransactionFileError",
    "FileFormatError",
    "TransactionParseError",
    "MissingColumnsError",
    "ConfigurationError",
    "ExportError",
    "ReportGenerationError",
    "setup_logging",
]
