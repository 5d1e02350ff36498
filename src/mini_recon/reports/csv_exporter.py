"""
CSV export of reconciliation results.
Fields containing the delimiter, quotes or newlines are quoted.
"""

from pathlib import Path
from typing import Optional, Sequence
import logging

import pandas as pd

from ..config import ReconConfig
from ..currency.rates import BASE_CURRENCY
from ..models.transaction import Discrepancy, ReconciliationResult, Transaction
from ..utils.exceptions import ExportError

logger = logging.getLogger(__name__)

TRANSACTION_COLUMNS = ["transaction_reference", "amount", "currency", "status"]
DISCREPANCY_COLUMNS = [
    "transaction_reference",
    "internal_amount",
    "provider_amount",
    "internal_status",
    "provider_status",
    "internal_currency",
    "provider_currency",
]


def transactions_to_dataframe(
    transactions: Sequence[Transaction], base_currency: str = BASE_CURRENCY
) -> pd.DataFrame:
    """Tabulate transactions, appending extra source columns in first-seen order.

    Transactions without a currency are written with ``base_currency``.
    """
    extra_columns: list[str] = []
    for txn in transactions:
        for column in txn.extra:
            if column not in extra_columns and column not in TRANSACTION_COLUMNS:
                extra_columns.append(column)

    rows = []
    for txn in transactions:
        row = {
            "transaction_reference": txn.reference,
            "amount": str(txn.amount),
            "currency": txn.currency or base_currency,
            "status": txn.status,
        }
        for column in extra_columns:
            row[column] = txn.extra.get(column, "")
        rows.append(row)

    return pd.DataFrame(rows, columns=TRANSACTION_COLUMNS + extra_columns)


def discrepancies_to_dataframe(discrepancies: Sequence[Discrepancy]) -> pd.DataFrame:
    rows = [
        {
            "transaction_reference": d.reference,
            "internal_amount": str(d.internal_amount),
            "provider_amount": str(d.provider_amount),
            "internal_status": d.internal_status,
            "provider_status": d.provider_status,
            "internal_currency": d.internal_currency,
            "provider_currency": d.provider_currency,
        }
        for d in discrepancies
    ]
    return pd.DataFrame(rows, columns=DISCREPANCY_COLUMNS)


def _write(df: pd.DataFrame, output_path: Path) -> Path:
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(output_path, index=False)
    except OSError as e:
        raise ExportError(f"Failed to write {output_path}: {e}") from e

    logger.info(f"Exported {len(df)} rows to {output_path}")
    return output_path


def export_transactions(
    transactions: Sequence[Transaction],
    output_path: Path,
    base_currency: str = BASE_CURRENCY,
) -> Optional[Path]:
    """
    Write transactions to CSV.

    Args:
        transactions: Transactions to export
        output_path: Destination file
        base_currency: Currency written for transactions that carry none

    Returns:
        The written path, or None when there was nothing to export
    """
    if not transactions:
        logger.info(f"No transactions to export, skipping {output_path.name}")
        return None
    return _write(transactions_to_dataframe(transactions, base_currency), output_path)


def export_discrepancies(
    discrepancies: Sequence[Discrepancy], output_path: Path
) -> Optional[Path]:
    """
    Write discrepancies to CSV with normalized amounts.

    Args:
        discrepancies: Discrepancy records to export
        output_path: Destination file

    Returns:
        The written path, or None when there was nothing to export
    """
    if not discrepancies:
        logger.info(f"No discrepancies to export, skipping {output_path.name}")
        return None
    return _write(discrepancies_to_dataframe(discrepancies), output_path)


def export_result(
    result: ReconciliationResult, output_dir: Path, config: ReconConfig
) -> list[Path]:
    """
    Export every non-empty collection of a result into ``output_dir``.

    Returns:
        Paths of the files written
    """
    names = config.output.csv
    base = config.currency.base_currency
    written = [
        export_transactions(result.matched, output_dir / names.matched, base),
        export_transactions(result.internal_only, output_dir / names.internal_only, base),
        export_transactions(result.provider_only, output_dir / names.provider_only, base),
        export_discrepancies(result.discrepancies, output_dir / names.discrepancies),
    ]
    return [path for path in written if path is not None]
