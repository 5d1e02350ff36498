"""Custom exceptions for the reconciliation application."""

from typing import Optional, Sequence


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class TransactionFileError(ReconciliationError):
    """Error loading a transaction file; reconciliation never starts."""

    error_type = "file"


class FileFormatError(TransactionFileError):
    """Input is not a recognizable transaction file (e.g. wrong file type)."""

    error_type = "format"


class TransactionParseError(TransactionFileError):
    """The CSV decoder failed on malformed content."""

    error_type = "parsing"


class MissingColumnsError(TransactionFileError):
    """Required columns are absent from the file header."""

    error_type = "columns"

    def __init__(
        self,
        required: Sequence[str],
        missing: Optional[Sequence[str]] = None,
    ):
        self.required = list(required)
        self.missing = list(missing) if missing is not None else list(required)
        super().__init__(
            f"CSV must contain columns: {', '.join(self.required)} "
            f"(currency is optional); missing: {', '.join(self.missing)}"
        )


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class ExportError(ReconciliationError):
    """Error writing a CSV export."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass
