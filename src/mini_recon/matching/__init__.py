"""Reconciliation engine and comparison rules."""

from .engine import ReconciliationEngine, reconcile
from .strategies import (
    DEFAULT_AMOUNT_TOLERANCE,
    ComparisonRule,
    AmountToleranceRule,
    ExactStatusRule,
    default_rules,
)

__all__ = [
    "ReconciliationEngine",
    "reconcile",
    "DEFAULT_AMOUNT_TOLERANCE",
    "ComparisonRule",
    "AmountToleranceRule",
    "ExactStatusRule",
    "default_rules",
]
