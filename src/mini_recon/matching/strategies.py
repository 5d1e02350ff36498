"""
Comparison rules for transactions that share a reference.
Each rule checks one field of a matched pair.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional, Union

from ..models.transaction import IndexedTransaction

DEFAULT_AMOUNT_TOLERANCE = Decimal("0.01")


class ComparisonRule(ABC):
    """Abstract base class for pair comparison rules."""

    # Reason recorded on a discrepancy when this rule fails
    name: str = ""

    @abstractmethod
    def compare(
        self,
        internal: IndexedTransaction,
        provider: IndexedTransaction,
    ) -> Optional[str]:
        """
        Compare a matched pair.

        Args:
            internal: Internal transaction with its normalized amount
            provider: Provider transaction with its normalized amount

        Returns:
            A description of the mismatch, or None when the pair agrees
        """
        pass


class AmountToleranceRule(ComparisonRule):
    """
    Normalized amounts agree when their absolute difference is strictly
    below a fixed tolerance in base-currency units.
    """

    name = "amount"

    def __init__(self, tolerance: Union[Decimal, float, str] = DEFAULT_AMOUNT_TOLERANCE):
        """
        Initialize with an absolute tolerance.

        Args:
            tolerance: Smallest difference treated as a mismatch
        """
        self.tolerance = tolerance if isinstance(tolerance, Decimal) else Decimal(str(tolerance))

    def compare(
        self,
        internal: IndexedTransaction,
        provider: IndexedTransaction,
    ) -> Optional[str]:
        difference = abs(internal.normalized_amount - provider.normalized_amount)
        if difference < self.tolerance:
            return None
        return (
            f"Amount differs by {difference:.2f} "
            f"({internal.normalized_amount:.2f} vs {provider.normalized_amount:.2f})"
        )


class ExactStatusRule(ComparisonRule):
    """Statuses agree only on exact string equality; no trimming."""

    name = "status"

    def __init__(self, case_sensitive: bool = True):
        self.case_sensitive = case_sensitive

    def compare(
        self,
        internal: IndexedTransaction,
        provider: IndexedTransaction,
    ) -> Optional[str]:
        internal_status = internal.status
        provider_status = provider.status
        if not self.case_sensitive:
            internal_status = internal_status.casefold()
            provider_status = provider_status.casefold()

        if internal_status == provider_status:
            return None
        return f"Status differs ({internal.status!r} vs {provider.status!r})"


def default_rules(
    tolerance: Union[Decimal, float, str] = DEFAULT_AMOUNT_TOLERANCE,
) -> list[ComparisonRule]:
    """The standard amount-then-status rule set."""
    return [AmountToleranceRule(tolerance), ExactStatusRule()]
