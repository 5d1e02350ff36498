"""Data models for reconciliation transactions and results."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Mapping, Optional

from ..currency.rates import BASE_CURRENCY


@dataclass(frozen=True)
class Transaction:
    """
    A single ledger entry from either the internal or the provider export.

    Transactions are immutable; reconciliation only derives values from them.
    """

    # Join key between the two ledgers (exact, case-sensitive)
    reference: str

    # Amount in ``currency``; negative for refunds and reversals
    amount: Decimal

    # Free-form status label, compared verbatim
    status: str

    # None means the record is already in the base currency
    currency: Optional[str] = None

    # Unrecognized source columns, kept so exports can write them back out
    extra: Mapping[str, str] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Coerce the amount to Decimal and reject unusable records."""
        if not self.reference or not self.reference.strip():
            raise ValueError("Transaction reference must not be blank")

        amount = self.amount
        if not isinstance(amount, Decimal):
            amount = Decimal(str(amount))
            object.__setattr__(self, "amount", amount)
        if not amount.is_finite():
            raise ValueError(f"Transaction {self.reference} has a non-finite amount")

        if self.currency is not None and not self.currency.strip():
            object.__setattr__(self, "currency", None)


@dataclass(frozen=True)
class IndexedTransaction:
    """A transaction paired with its amount in the base currency."""

    transaction: Transaction
    normalized_amount: Decimal

    @property
    def reference(self) -> str:
        return self.transaction.reference

    @property
    def status(self) -> str:
        return self.transaction.status


@dataclass(frozen=True)
class Discrepancy:
    """A reference present on both sides whose amount or status disagrees."""

    # The internal side of the pair
    transaction: Transaction

    internal_amount: Decimal
    provider_amount: Decimal
    internal_status: str
    provider_status: str
    internal_currency: str = BASE_CURRENCY
    provider_currency: str = BASE_CURRENCY

    # Names of the failed comparisons, e.g. ("amount", "status")
    reasons: tuple[str, ...] = ()

    @property
    def reference(self) -> str:
        return self.transaction.reference

    @property
    def amount_difference(self) -> Decimal:
        """Internal minus provider, in the base currency."""
        return self.internal_amount - self.provider_amount

    @property
    def has_amount_mismatch(self) -> bool:
        return "amount" in self.reasons

    @property
    def has_status_mismatch(self) -> bool:
        return "status" in self.reasons


@dataclass(frozen=True)
class ReconciliationResult:
    """Snapshot produced by one reconciliation run."""

    matched: tuple[Transaction, ...] = ()
    internal_only: tuple[Transaction, ...] = ()
    provider_only: tuple[Transaction, ...] = ()
    discrepancies: tuple[Discrepancy, ...] = ()

    # Non-fatal diagnostics (unknown currencies, duplicate references)
    warnings: tuple[str, ...] = ()

    @property
    def total_transactions(self) -> int:
        return len(self.matched) + len(self.internal_only) + len(self.provider_only)

    @property
    def match_rate(self) -> float:
        """Percentage of distinct references that were found on both sides."""
        if self.total_transactions == 0:
            return 0.0
        return (len(self.matched) / self.total_transactions) * 100

    @property
    def has_discrepancies(self) -> bool:
        return bool(self.discrepancies)


@dataclass
class ReconciliationSummary:
    """Summary of the reconciliation process."""

    # File information
    internal_filename: str
    provider_filename: str
    reconciliation_date: datetime
    base_currency: str

    # Transaction counts
    total_internal_transactions: int
    total_provider_transactions: int

    # Match results
    matched_count: int
    internal_only_count: int
    provider_only_count: int
    discrepancy_count: int
    amount_discrepancy_count: int
    status_discrepancy_count: int

    # Sum of absolute amount differences across discrepancies (base currency)
    total_amount_variance: Decimal

    warning_count: int = 0
    has_multiple_currencies: bool = False
    currencies: list[str] = field(default_factory=list)

    # Processing metadata
    processing_time_seconds: float = 0.0
    config_file_used: Optional[str] = None

    @property
    def match_rate(self) -> float:
        """Matched references as a share of all distinct references."""
        total = self.matched_count + self.internal_only_count + self.provider_only_count
        if total == 0:
            return 0.0
        return (self.matched_count / total) * 100

    @property
    def match_rate_internal(self) -> float:
        """Percentage of internal references found at the provider."""
        internal_total = self.matched_count + self.internal_only_count
        if internal_total == 0:
            return 0.0
        return (self.matched_count / internal_total) * 100

    @property
    def match_rate_provider(self) -> float:
        """Percentage of provider references found internally."""
        provider_total = self.matched_count + self.provider_only_count
        if provider_total == 0:
            return 0.0
        return (self.matched_count / provider_total) * 100

    @property
    def clean_match_count(self) -> int:
        """Matched references with no amount or status disagreement."""
        return self.matched_count - self.discrepancy_count
