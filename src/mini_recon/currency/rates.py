"""
Static exchange-rate tables.

``rate[C]`` is the number of units of C that one base unit buys (1 KSh =
0.0077 USD), so a foreign amount is converted to the base currency by
dividing by the rate.
"""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Iterable, Iterator, Optional, Union

from ..utils.exceptions import ConfigurationError

BASE_CURRENCY = "KSh"
BASE_CURRENCY_ALIASES = ("KSHILLINGS",)

RateValue = Union[Decimal, float, int, str]


class ExchangeRateTable(Mapping):
    """
    Read-only mapping of upper-cased currency code to rate.

    Lookups are case-insensitive. The base currency always maps to exactly 1.
    """

    def __init__(
        self,
        rates: Mapping[str, RateValue],
        base_currency: str = BASE_CURRENCY,
        base_aliases: Optional[Iterable[str]] = None,
    ):
        if not base_currency:
            raise ConfigurationError("Base currency code must not be empty")

        # The built-in aliases only name the built-in base
        if base_aliases is None:
            is_default_base = base_currency.upper() == BASE_CURRENCY.upper()
            base_aliases = BASE_CURRENCY_ALIASES if is_default_base else ()

        self.base_currency = base_currency
        self._base_codes = frozenset(
            [base_currency.upper()] + [alias.upper() for alias in base_aliases]
        )

        table: dict[str, Decimal] = {}
        for code, value in rates.items():
            canonical = self.canonicalize(code)
            if not canonical:
                raise ConfigurationError("Exchange rate table contains an empty currency code")

            rate = self._coerce_rate(canonical, value)
            if canonical in self._base_codes and rate != Decimal("1"):
                raise ConfigurationError(
                    f"Base currency {base_currency} must have a rate of 1, got {value}"
                )
            table[canonical] = rate

        table.setdefault(base_currency.upper(), Decimal("1"))
        self._rates = table

    @staticmethod
    def canonicalize(code: str) -> str:
        """Canonical form of a currency code used for lookups."""
        return code.strip().upper()

    @staticmethod
    def _coerce_rate(code: str, value: RateValue) -> Decimal:
        try:
            rate = value if isinstance(value, Decimal) else Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise ConfigurationError(f"Invalid exchange rate for {code}: {value!r}") from e

        if not rate.is_finite() or rate <= 0:
            raise ConfigurationError(f"Exchange rate for {code} must be positive, got {value}")
        return rate

    def is_base(self, code: Optional[str]) -> bool:
        """True for a blank code, the base code or one of its aliases."""
        if not code or not code.strip():
            return True
        return self.canonicalize(code) in self._base_codes

    def rate_for(self, code: str) -> Optional[Decimal]:
        """Rate for ``code`` or None when the table has no entry."""
        return self._rates.get(self.canonicalize(code))

    def __getitem__(self, code: str) -> Decimal:
        return self._rates[self.canonicalize(code)]

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and self.canonicalize(code) in self._rates

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"ExchangeRateTable(base={self.base_currency!r}, rates={self._rates!r})"


DEFAULT_RATES: dict[str, float] = {
    "KSh": 1.0,  # Kenyan Shilling (base)
    "USD": 0.0077,
    "EUR": 0.0074,
    "GBP": 0.0063,
    "ZAR": 0.14,
    "UGX": 28.5,
    "TZS": 18.2,
    "RWF": 10.5,
    "ETB": 0.42,
    "NGN": 12.8,
}

DEFAULT_EXCHANGE_RATES = ExchangeRateTable(DEFAULT_RATES)
