"""Currency normalization and exchange-rate tables."""

from .converter import (
    Conversion,
    convert_to_base,
    convert_from_base,
    normalize,
    supported_currencies,
    get_exchange_rate_info,
)
from .formatting import format_currency
from .rates import (
    BASE_CURRENCY,
    DEFAULT_EXCHANGE_RATES,
    ExchangeRateTable,
)

__all__ = [
    "BASE_CURRENCY",
    "DEFAULT_EXCHANGE_RATES",
    "Conversion",
    "ExchangeRateTable",
    "convert_to_base",
    "convert_from_base",
    "normalize",
    "supported_currencies",
    "get_exchange_rate_info",
    "format_currency",
]
