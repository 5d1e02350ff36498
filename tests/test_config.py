import logging
import pytest
from decimal import Decimal

import yaml

from mini_recon.config import (
    ReconConfig,
    build_rate_table,
    generate_default_config,
    get_default_config,
    load_config,
)
from mini_recon.utils.exceptions import ConfigurationError
from mini_recon.utils.logging_config import setup_logging


def test_defaults():
    config = load_config(None)

    assert config.currency.base_currency == "KSh"
    assert config.matching.amount_tolerance == 0.01
    assert config.matching.status_case_sensitive is True
    assert config.input.column_mappings["reference"] == "transaction_reference"
    assert config.config_file_path is None


def test_default_dict_matches_model():
    assert ReconConfig(**get_default_config()) == ReconConfig()


def test_default_rate_table():
    table = build_rate_table(ReconConfig())

    assert table["USD"] == Decimal("0.0077")
    assert table["KSH"] == Decimal("1")
    assert len(table) == 10


def test_yaml_overrides_merge_with_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.dump({"matching": {"amount_tolerance": 0.5}, "input": {"delimiter": ";"}})
    )

    config = load_config(path)

    assert config.matching.amount_tolerance == 0.5
    assert config.matching.status_case_sensitive is True
    assert config.input.delimiter == ";"
    assert config.input.encoding == "utf-8"
    assert config.config_file_path == str(path)


def test_yaml_rates_replace_default_table(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"currency": {"exchange_rates": {"USD": 0.008}}}))

    table = build_rate_table(load_config(path))

    assert table["USD"] == Decimal("0.008")
    assert "EUR" not in table
    assert "KSh" in table


def test_custom_base_currency_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.dump({"currency": {"base_currency": "USD", "exchange_rates": {"KSh": 130}}})
    )

    table = build_rate_table(load_config(path))

    assert table.base_currency == "USD"
    assert table["USD"] == Decimal("1")
    assert table.is_base(None)
    assert not table.is_base("KShillings")


def test_invalid_base_rate_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"currency": {"exchange_rates": {"KSh": 0.5}}}))

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_non_positive_tolerance_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"matching": {"amount_tolerance": 0}}))

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_invalid_yaml_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("matching: [unclosed\n")

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_non_mapping_yaml_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_generated_config_loads(tmp_path):
    path = tmp_path / "nested" / "config.yaml"

    generate_default_config(path)
    config = load_config(path)

    assert path.read_text().startswith("# Mini Reconciliation Tool configuration")
    assert config.currency.exchange_rates == ReconConfig().currency.exchange_rates


class TestSetupLogging:
    def test_accepts_level_names(self):
        logger = setup_logging("debug")
        assert logger.name == "mini_recon"
        assert logger.level == logging.DEBUG

    def test_reconfiguring_replaces_handlers(self):
        setup_logging(logging.INFO)
        logger = setup_logging(logging.WARNING)
        assert len(logger.handlers) == 1

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "recon.log"
        logger = setup_logging(logging.INFO, log_file=log_file)

        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()

        assert "hello" in log_file.read_text()
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            setup_logging("LOUD")
