"""Display helpers for monetary amounts."""

from decimal import Decimal
from typing import Union

from .rates import BASE_CURRENCY, BASE_CURRENCY_ALIASES

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def format_currency(amount: Union[Decimal, float, int], currency: str = BASE_CURRENCY) -> str:
    """
    Format an amount with its currency symbol and thousands grouping.

    Args:
        amount: Numeric amount (never a pre-formatted string)
        currency: Currency code, case-insensitive

    Returns:
        Display string such as ``KSh 1,234.50`` or ``$12.00``
    """
    code = (currency or BASE_CURRENCY).upper()
    grouped = f"{amount:,.2f}"

    if code == BASE_CURRENCY.upper() or code in BASE_CURRENCY_ALIASES:
        return f"{BASE_CURRENCY} {grouped}"

    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        # Keep the sign ahead of the symbol: -$5.00
        if grouped.startswith("-"):
            return f"-{symbol}{grouped[1:]}"
        return f"{symbol}{grouped}"

    return f"{currency} {grouped}"
