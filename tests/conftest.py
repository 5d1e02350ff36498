import logging
import pytest
from decimal import Decimal

from mini_recon.config import ReconConfig
from mini_recon.currency.rates import ExchangeRateTable
from mini_recon.models.transaction import Transaction


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging so streams don't leak between tests."""
    yield
    logger = logging.getLogger("mini_recon")
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def rates():
    """Small injected rate table; tests never rely on the built-in defaults."""
    return ExchangeRateTable(
        {
            "USD": 0.0077,
            "KSh": 1.0,
            "EUR": 0.0074,
            "UGX": 28.5,
        }
    )


@pytest.fixture
def recon_config():
    return ReconConfig()


@pytest.fixture
def make_txn():
    """Factory for transactions with sensible defaults."""
    def _make(reference, amount=100, status="Completed", currency=None, **extra):
        kwargs = {
            "reference": reference,
            "amount": Decimal(str(amount)),
            "status": status,
        }
        if currency is not None:
            kwargs["currency"] = currency
        if extra:
            kwargs["extra"] = extra
        return Transaction(**kwargs)
    return _make


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a file under tmp_path and return its path."""
    def _write(name, content, encoding="utf-8"):
        path = tmp_path / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding=encoding)
        return path
    return _write
