"""Data models for reconciliation."""

from .transaction import (
    Transaction,
    IndexedTransaction,
    Discrepancy,
    ReconciliationResult,
    ReconciliationSummary,
)

__all__ = [
    "Transaction",
    "IndexedTransaction",
    "Discrepancy",
    "ReconciliationResult",
    "ReconciliationSummary",
]
