import logging
import pytest
from decimal import Decimal

from mini_recon.currency import (
    DEFAULT_EXCHANGE_RATES,
    ExchangeRateTable,
    convert_from_base,
    convert_to_base,
    format_currency,
    get_exchange_rate_info,
    normalize,
    supported_currencies,
)
from mini_recon.utils.exceptions import ConfigurationError

TOLERANCE = Decimal("0.01")


class TestNormalize:
    @pytest.mark.parametrize("code", ["KSh", "KSH", "ksh", "KShillings", "kshillings"])
    def test_base_currency_is_identity(self, rates, code):
        assert normalize(Decimal("250.75"), code, rates) == Decimal("250.75")

    @pytest.mark.parametrize("code", [None, "", "   "])
    def test_missing_currency_is_treated_as_base(self, rates, code):
        assert normalize(Decimal("42"), code, rates) == Decimal("42")

    def test_foreign_amount_divided_by_rate(self, rates):
        result = normalize(Decimal("10"), "USD", rates)
        assert result == Decimal("10") / Decimal("0.0077")
        assert abs(result - Decimal("1298.70")) < TOLERANCE

    def test_currency_code_is_case_insensitive(self, rates):
        assert normalize(10, "usd", rates) == normalize(10, "USD", rates)

    def test_rate_above_one(self, rates):
        assert normalize(Decimal("285"), "UGX", rates) == Decimal("10")

    def test_negative_amounts_are_converted(self, rates):
        assert normalize(Decimal("-10"), "USD", rates) == -normalize(Decimal("10"), "USD", rates)

    def test_float_input_has_no_binary_artifacts(self, rates):
        assert normalize(10.01, "KSh", rates) == Decimal("10.01")

    def test_unknown_currency_falls_back_to_identity(self, rates):
        assert normalize(Decimal("50"), "XYZ", rates) == Decimal("50")

    def test_unknown_currency_logs_warning(self, rates, caplog):
        with caplog.at_level(logging.WARNING, logger="mini_recon"):
            normalize(Decimal("50"), "XYZ", rates)
        assert "Exchange rate not found for currency: XYZ" in caplog.text
        assert "1:1" in caplog.text


class TestConvertToBase:
    def test_returns_warning_instead_of_raising(self, rates):
        conversion = convert_to_base(Decimal("5"), "abc", rates)
        assert conversion.amount == Decimal("5")
        assert conversion.currency == "ABC"
        assert conversion.rate is None
        assert "abc" in conversion.warning

    def test_known_currency_carries_rate(self, rates):
        conversion = convert_to_base(Decimal("1"), "eur", rates)
        assert conversion.rate == Decimal("0.0074")
        assert conversion.currency == "EUR"
        assert conversion.warning is None

    def test_base_currency_reports_base_code(self, rates):
        conversion = convert_to_base(Decimal("1"), "KSHILLINGS", rates)
        assert conversion.currency == "KSh"
        assert conversion.rate is None


class TestRoundTrip:
    @pytest.mark.parametrize("code", ["USD", "EUR", "UGX", "KSh"])
    @pytest.mark.parametrize("amount", ["0", "1234.56", "-99.99", "0.01", "1000000"])
    def test_base_to_foreign_to_base(self, rates, code, amount):
        value = Decimal(amount)
        foreign = convert_from_base(value, code, rates)
        assert abs(normalize(foreign, code, rates) - value) < TOLERANCE

    def test_unknown_currency_inverse_is_identity(self, rates):
        assert convert_from_base(Decimal("7"), "XYZ", rates) == Decimal("7")


class TestExchangeRateTable:
    def test_base_rate_inserted_when_absent(self):
        table = ExchangeRateTable({"USD": 0.0077})
        assert table["KSH"] == Decimal("1")
        assert len(table) == 2

    def test_keys_are_canonicalized(self, rates):
        assert "usd" in rates
        assert rates["usd"] == Decimal("0.0077")
        assert "KSH" in list(rates)

    def test_rate_for_unknown_code(self, rates):
        assert rates.rate_for("XYZ") is None
        assert "XYZ" not in rates

    def test_base_rate_must_be_one(self):
        with pytest.raises(ConfigurationError):
            ExchangeRateTable({"KSh": 2.0})

    @pytest.mark.parametrize("bad_rate", [0, -1.5, "abc", float("inf")])
    def test_rejects_invalid_rates(self, bad_rate):
        with pytest.raises(ConfigurationError):
            ExchangeRateTable({"USD": bad_rate})

    def test_custom_base_currency(self):
        table = ExchangeRateTable({"KSH": 130.0}, base_currency="USD", base_aliases=())
        assert table.is_base("usd")
        assert not table.is_base("KSh")
        assert normalize(Decimal("1300"), "KSh", table) == Decimal("10")

    def test_custom_base_drops_built_in_aliases(self):
        table = ExchangeRateTable({"KSH": 130.0}, base_currency="USD")
        assert table.is_base("USD")
        assert not table.is_base("KShillings")
        assert ExchangeRateTable({}).is_base("KShillings")

    def test_default_table(self):
        assert DEFAULT_EXCHANGE_RATES["KSh"] == Decimal("1")
        assert DEFAULT_EXCHANGE_RATES["USD"] == Decimal("0.0077")
        assert DEFAULT_EXCHANGE_RATES.base_currency == "KSh"

    def test_supported_currencies(self, rates):
        assert sorted(supported_currencies(rates)) == ["EUR", "KSH", "UGX", "USD"]


class TestExchangeRateInfo:
    def test_base_currency(self, rates):
        assert get_exchange_rate_info("ksh", rates) == "Base currency"

    def test_rate_below_one_shows_base_per_unit(self, rates):
        assert get_exchange_rate_info("USD", rates) == "1 USD = 129.87 KSh"

    def test_rate_above_one_shows_units_per_base(self, rates):
        assert get_exchange_rate_info("ugx", rates) == "1 KSh = 28.5000 UGX"

    def test_unknown_currency(self, rates):
        assert get_exchange_rate_info("XYZ", rates) == "Rate not available"


class TestFormatCurrency:
    def test_base_currency(self):
        assert format_currency(Decimal("1234.5")) == "KSh 1,234.50"
        assert format_currency(Decimal("10"), "kshillings") == "KSh 10.00"

    def test_symbol_currencies(self):
        assert format_currency(Decimal("1234.5"), "USD") == "$1,234.50"
        assert format_currency(Decimal("3"), "eur") == "€3.00"
        assert format_currency(Decimal("3"), "GBP") == "£3.00"

    def test_negative_amount_sign_precedes_symbol(self):
        assert format_currency(Decimal("-5"), "USD") == "-$5.00"

    def test_other_currency_uses_code(self):
        assert format_currency(Decimal("1000"), "NGN") == "NGN 1,000.00"
