"""
Currency normalization into the base currency.

Unknown currencies never fail a reconciliation: they fall back to a 1:1
conversion and the caller receives a warning alongside the amount.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union
import logging

from .rates import ExchangeRateTable

logger = logging.getLogger(__name__)

Amount = Union[Decimal, float, int, str]


@dataclass(frozen=True)
class Conversion:
    """Outcome of converting one amount into the base currency."""

    amount: Decimal
    currency: str
    rate: Optional[Decimal] = None
    warning: Optional[str] = None


def to_decimal(amount: Amount) -> Decimal:
    """Coerce a numeric value to Decimal without float artifacts."""
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


def convert_to_base(
    amount: Amount,
    currency_code: Optional[str],
    table: ExchangeRateTable,
) -> Conversion:
    """
    Convert ``amount`` in ``currency_code`` to the table's base currency.

    Args:
        amount: Amount in the source currency (negative values allowed)
        currency_code: Source currency code, case-insensitive; blank means base
        table: Exchange rate table

    Returns:
        Conversion carrying the base amount and, for unknown codes, a warning
    """
    value = to_decimal(amount)

    if table.is_base(currency_code):
        return Conversion(amount=value, currency=table.base_currency)

    code = table.canonicalize(currency_code)
    rate = table.rate_for(code)
    if rate is None:
        return Conversion(
            amount=value,
            currency=code,
            warning=(
                f"Exchange rate not found for currency: {currency_code}. "
                "Using 1:1 conversion."
            ),
        )

    return Conversion(amount=value / rate, currency=code, rate=rate)


def normalize(
    amount: Amount,
    currency_code: Optional[str],
    table: ExchangeRateTable,
) -> Decimal:
    """Return ``amount`` expressed in the base currency, logging any fallback."""
    conversion = convert_to_base(amount, currency_code, table)
    if conversion.warning:
        logger.warning(conversion.warning)
    return conversion.amount


def convert_from_base(
    amount: Amount,
    currency_code: Optional[str],
    table: ExchangeRateTable,
) -> Decimal:
    """Inverse of :func:`normalize`: express a base amount in ``currency_code``."""
    value = to_decimal(amount)
    if table.is_base(currency_code):
        return value

    rate = table.rate_for(currency_code)
    if rate is None:
        return value
    return value * rate


def supported_currencies(table: ExchangeRateTable) -> list[str]:
    """Currency codes present in the table."""
    return list(table.keys())


def get_exchange_rate_info(currency_code: str, table: ExchangeRateTable) -> str:
    """Human-readable description of a currency's rate against the base."""
    rate = table.rate_for(currency_code)
    if rate is None:
        return "Rate not available"

    code = table.canonicalize(currency_code)
    if table.is_base(code):
        return "Base currency"
    if rate < 1:
        return f"1 {code} = {1 / rate:.2f} {table.base_currency}"
    return f"1 {table.base_currency} = {rate:.4f} {code}"
