"""Configuration loader and validation for reconciliation settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .currency.rates import (
    BASE_CURRENCY,
    DEFAULT_RATES,
    ExchangeRateTable,
)
from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_MAPPINGS = {
    "reference": "transaction_reference",
    "amount": "amount",
    "status": "status",
    "currency": "currency",
}


class InputConfig(BaseModel):
    """Configuration for transaction file parsing."""

    encoding: str = "utf-8"
    delimiter: str = ","
    column_mappings: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_COLUMN_MAPPINGS)
    )


class CurrencyConfig(BaseModel):
    """Base currency and the static exchange-rate table."""

    base_currency: str = BASE_CURRENCY
    # None uses the built-in aliases when the base is the built-in one
    base_aliases: Optional[list[str]] = None
    exchange_rates: dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_RATES))


class MatchingSettings(BaseModel):
    """Comparison settings for references found on both sides."""

    amount_tolerance: float = 0.01
    status_case_sensitive: bool = True

    @field_validator("amount_tolerance")
    @classmethod
    def _tolerance_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("amount_tolerance must be greater than zero")
        return value


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "reconciliation_report_{date}_{time}.xlsx"
    include_timestamp: bool = True


class CsvOutputConfig(BaseModel):
    """File names for the CSV exports."""

    matched: str = "matched_transactions.csv"
    internal_only: str = "internal_only.csv"
    provider_only: str = "provider_only.csv"
    discrepancies: str = "discrepancies.csv"


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    matched: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Matched Transactions"))
    internal_only: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Internal Only"))
    provider_only: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Provider Only"))
    discrepancies: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Discrepancies"))
    exchange_rates: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Exchange Rates")
    )


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    csv: CsvOutputConfig = Field(default_factory=CsvOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    currency: CurrencyConfig = Field(default_factory=CurrencyConfig)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "encoding": "utf-8",
            "delimiter": ",",
            "column_mappings": dict(DEFAULT_COLUMN_MAPPINGS),
        },
        "currency": {
            "base_currency": BASE_CURRENCY,
            "base_aliases": None,
            "exchange_rates": dict(DEFAULT_RATES),
        },
        "matching": {
            "amount_tolerance": 0.01,
            "status_case_sensitive": True,
        },
        "output": {
            "excel": {
                "filename_template": "reconciliation_report_{date}_{time}.xlsx",
                "include_timestamp": True,
            },
            "csv": {
                "matched": "matched_transactions.csv",
                "internal_only": "internal_only.csv",
                "provider_only": "provider_only.csv",
                "discrepancies": "discrepancies.csv",
            },
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "matched": {"enabled": True, "name": "Matched Transactions"},
                "internal_only": {"enabled": True, "name": "Internal Only"},
                "provider_only": {"enabled": True, "name": "Provider Only"},
                "discrepancies": {"enabled": True, "name": "Discrepancies"},
                "exchange_rates": {"enabled": True, "name": "Exchange Rates"},
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        # Rates replace the defaults wholesale so a custom table can drop codes
        currency_section = user_config.get("currency") or {}
        user_rates = (
            currency_section.get("exchange_rates")
            if isinstance(currency_section, dict)
            else None
        )
        config_dict = _deep_merge(config_dict, user_config)
        if user_rates is not None:
            config_dict["currency"]["exchange_rates"] = user_rates
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        config = ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    # Fail fast on a bad rate table rather than mid-run
    build_rate_table(config)
    return config


def build_rate_table(config: ReconConfig) -> ExchangeRateTable:
    """Build the exchange-rate table described by the configuration."""
    currency = config.currency
    return ExchangeRateTable(
        currency.exchange_rates,
        base_currency=currency.base_currency,
        base_aliases=currency.base_aliases,
    )


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Mini Reconciliation Tool configuration
# Exchange rates: units of each currency per one unit of the base currency

"""
    yaml_content += yaml.dump(
        config_dict, default_flow_style=False, sort_keys=False, allow_unicode=True
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
