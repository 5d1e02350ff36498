"""
Reconciliation engine for internal and provider transaction ledgers.
Matches on exact reference, then compares normalized amount and status.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union
import logging

from ..config import ReconConfig, build_rate_table
from ..currency.converter import convert_to_base
from ..currency.rates import ExchangeRateTable
from ..models.transaction import (
    Discrepancy,
    IndexedTransaction,
    ReconciliationResult,
    ReconciliationSummary,
    Transaction,
)
from .strategies import (
    DEFAULT_AMOUNT_TOLERANCE,
    AmountToleranceRule,
    ComparisonRule,
    ExactStatusRule,
    default_rules,
)

logger = logging.getLogger(__name__)


def reconcile(
    internal: Iterable[Transaction],
    provider: Iterable[Transaction],
    rates: ExchangeRateTable,
    tolerance: Union[Decimal, float, str] = DEFAULT_AMOUNT_TOLERANCE,
    rules: Optional[Sequence[ComparisonRule]] = None,
) -> ReconciliationResult:
    """
    Reconcile two transaction ledgers by reference.

    A reference repeated within one side keeps its first position but the
    data of its last occurrence, and is reported in ``warnings``.

    Args:
        internal: Transactions from the internal system
        provider: Transactions from the provider statement
        rates: Exchange-rate table used to normalize amounts
        tolerance: Absolute amount tolerance in base-currency units
        rules: Comparison rules; defaults to amount tolerance plus exact status

    Returns:
        A new ReconciliationResult
    """
    active_rules = list(rules) if rules is not None else default_rules(tolerance)

    warnings: list[str] = []
    warned_currencies: set[str] = set()
    internal_index = _build_index(internal, rates, "internal", warnings, warned_currencies)
    provider_index = _build_index(provider, rates, "provider", warnings, warned_currencies)

    matched: list[Transaction] = []
    internal_only: list[Transaction] = []
    provider_only: list[Transaction] = []
    discrepancies: list[Discrepancy] = []

    for reference, internal_entry in internal_index.items():
        provider_entry = provider_index.get(reference)
        if provider_entry is None:
            internal_only.append(internal_entry.transaction)
            continue

        matched.append(internal_entry.transaction)

        reasons: list[str] = []
        for rule in active_rules:
            message = rule.compare(internal_entry, provider_entry)
            if message:
                reasons.append(rule.name)
                logger.debug(f"{internal_entry.reference}: {message}")

        if reasons:
            discrepancies.append(_build_discrepancy(internal_entry, provider_entry, rates, reasons))

    for reference, provider_entry in provider_index.items():
        if reference not in internal_index:
            provider_only.append(provider_entry.transaction)

    return ReconciliationResult(
        matched=tuple(matched),
        internal_only=tuple(internal_only),
        provider_only=tuple(provider_only),
        discrepancies=tuple(discrepancies),
        warnings=tuple(warnings),
    )


def _build_index(
    transactions: Iterable[Transaction],
    rates: ExchangeRateTable,
    side: str,
    warnings: list[str],
    warned_currencies: set[str],
) -> dict[str, IndexedTransaction]:
    """Index one side by reference, normalizing each amount."""
    index: dict[str, IndexedTransaction] = {}

    for txn in transactions:
        conversion = convert_to_base(txn.amount, txn.currency, rates)
        if conversion.warning and conversion.currency not in warned_currencies:
            warned_currencies.add(conversion.currency)
            warnings.append(conversion.warning)
            logger.warning(conversion.warning)

        if txn.reference in index:
            message = (
                f"Duplicate reference {txn.reference} in {side} transactions; "
                "the later record replaces the earlier one"
            )
            warnings.append(message)
            logger.warning(message)

        index[txn.reference] = IndexedTransaction(
            transaction=txn,
            normalized_amount=conversion.amount,
        )

    return index


def _build_discrepancy(
    internal_entry: IndexedTransaction,
    provider_entry: IndexedTransaction,
    rates: ExchangeRateTable,
    reasons: list[str],
) -> Discrepancy:
    internal_txn = internal_entry.transaction
    provider_txn = provider_entry.transaction
    return Discrepancy(
        transaction=internal_txn,
        internal_amount=internal_entry.normalized_amount,
        provider_amount=provider_entry.normalized_amount,
        internal_status=internal_txn.status,
        provider_status=provider_txn.status,
        internal_currency=internal_txn.currency or rates.base_currency,
        provider_currency=provider_txn.currency or rates.base_currency,
        reasons=tuple(reasons),
    )


class ReconciliationEngine:
    """
    Configuration-driven front end to :func:`reconcile`.

    Builds the rate table and comparison rules once from ``ReconConfig``.
    """

    def __init__(self, config: ReconConfig, rates: Optional[ExchangeRateTable] = None):
        """
        Initialize the reconciliation engine.

        Args:
            config: Application configuration
            rates: Exchange-rate table overriding the configured one
        """
        self.config = config
        self.rates = rates if rates is not None else build_rate_table(config)
        self.rules = self._build_rules()

    def _build_rules(self) -> list[ComparisonRule]:
        settings = self.config.matching
        return [
            AmountToleranceRule(settings.amount_tolerance),
            ExactStatusRule(case_sensitive=settings.status_case_sensitive),
        ]

    def reconcile(
        self,
        internal_transactions: Sequence[Transaction],
        provider_transactions: Sequence[Transaction],
    ) -> ReconciliationResult:
        """
        Perform reconciliation between internal and provider transactions.

        Args:
            internal_transactions: Transactions from the internal system
            provider_transactions: Transactions from the provider statement

        Returns:
            ReconciliationResult snapshot
        """
        start_time = datetime.now()
        logger.info(
            f"Starting reconciliation: {len(internal_transactions)} internal txns, "
            f"{len(provider_transactions)} provider txns"
        )

        result = reconcile(
            internal_transactions,
            provider_transactions,
            self.rates,
            rules=self.rules,
        )

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Reconciliation complete in {elapsed:.2f}s: {len(result.matched)} matched, "
            f"{len(result.internal_only)} internal-only, "
            f"{len(result.provider_only)} provider-only, "
            f"{len(result.discrepancies)} discrepancies"
        )

        return result

    def generate_summary(
        self,
        internal_transactions: Sequence[Transaction],
        provider_transactions: Sequence[Transaction],
        result: ReconciliationResult,
        internal_filename: str,
        provider_filename: str,
        processing_time: float,
    ) -> ReconciliationSummary:
        """
        Generate a summary of the reconciliation results.

        Args:
            internal_transactions: All internal transactions
            provider_transactions: All provider transactions
            result: Result of the reconciliation run
            internal_filename: Name of the internal export file
            provider_filename: Name of the provider statement file
            processing_time: Time taken in seconds

        Returns:
            Reconciliation summary object
        """
        total_variance = sum(
            (abs(d.amount_difference) for d in result.discrepancies if d.has_amount_mismatch),
            Decimal("0"),
        )

        currencies: list[str] = []
        has_foreign = False
        for txn in list(internal_transactions) + list(provider_transactions):
            if self.rates.is_base(txn.currency):
                code = self.rates.base_currency
            else:
                code = self.rates.canonicalize(txn.currency)
                has_foreign = True
            if code not in currencies:
                currencies.append(code)

        return ReconciliationSummary(
            internal_filename=internal_filename,
            provider_filename=provider_filename,
            reconciliation_date=datetime.now(),
            base_currency=self.rates.base_currency,
            total_internal_transactions=len(internal_transactions),
            total_provider_transactions=len(provider_transactions),
            matched_count=len(result.matched),
            internal_only_count=len(result.internal_only),
            provider_only_count=len(result.provider_only),
            discrepancy_count=len(result.discrepancies),
            amount_discrepancy_count=sum(
                1 for d in result.discrepancies if d.has_amount_mismatch
            ),
            status_discrepancy_count=sum(
                1 for d in result.discrepancies if d.has_status_mismatch
            ),
            total_amount_variance=total_variance,
            warning_count=len(result.warnings),
            has_multiple_currencies=has_foreign,
            currencies=currencies,
            processing_time_seconds=processing_time,
            config_file_used=self.config.config_file_path,
        )
