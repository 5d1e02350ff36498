"""
Transaction CSV parser.
Reads internal or provider exports into validated Transaction records.
"""

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional
import logging

import pandas as pd

from ..config import DEFAULT_COLUMN_MAPPINGS, ReconConfig
from ..models.transaction import Transaction
from ..utils.exceptions import (
    FileFormatError,
    MissingColumnsError,
    TransactionParseError,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("reference", "amount", "status")


class TransactionFileParser:
    """
    Parser for transaction CSV exports.

    The header must name the reference, amount and status columns; currency
    is optional. Rows without a reference or a numeric amount are dropped.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config
        self.encoding = config.input.encoding
        self.delimiter = config.input.delimiter
        self.base_currency = config.currency.base_currency

        mappings = dict(DEFAULT_COLUMN_MAPPINGS)
        mappings.update(config.input.column_mappings)
        self.column_mappings = mappings

    @property
    def required_columns(self) -> list[str]:
        return [self.column_mappings[name] for name in REQUIRED_FIELDS]

    def parse_file(self, file_path: Path) -> list[Transaction]:
        """
        Parse a transaction CSV file.

        Args:
            file_path: Path to the CSV file

        Returns:
            List of transactions in file order

        Raises:
            FileFormatError: If the file is not a CSV file
            TransactionParseError: If the CSV content cannot be decoded
            MissingColumnsError: If required columns are absent
        """
        logger.info(f"Parsing transaction file: {file_path}")

        df = self._read_csv(file_path)
        self._validate_columns(df)

        transactions = self._process_dataframe(df)
        logger.info(
            f"Extracted {len(transactions)} of {len(df)} rows from {Path(file_path).name}"
        )

        return transactions

    def _read_csv(self, file_path: Path) -> pd.DataFrame:
        path = Path(file_path)
        if path.suffix.lower() != ".csv":
            raise FileFormatError(f"Please upload a CSV file: {path.name}")

        try:
            return pd.read_csv(
                path,
                encoding=self.encoding,
                delimiter=self.delimiter,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
            )
        except pd.errors.EmptyDataError as e:
            raise MissingColumnsError(self.required_columns) from e
        except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
            logger.error(f"Failed to read CSV file: {e}")
            raise TransactionParseError(f"CSV parsing error: {e}") from e

    def _validate_columns(self, df: pd.DataFrame) -> None:
        required = self.required_columns
        missing = [col for col in required if col not in df.columns]
        if missing:
            raise MissingColumnsError(required, missing)

    def _process_dataframe(self, df: pd.DataFrame) -> list[Transaction]:
        """
        Convert DataFrame rows to transactions, dropping invalid rows.

        Args:
            df: DataFrame read with every cell as a string

        Returns:
            List of transactions
        """
        known_columns = set(self.column_mappings.values())
        extra_columns = [col for col in df.columns if col not in known_columns]

        transactions: list[Transaction] = []
        for idx, row in df.iterrows():
            txn = self._normalize_row(row, int(idx), extra_columns)
            if txn:
                transactions.append(txn)

        return transactions

    def _normalize_row(
        self, row: pd.Series, idx: int, extra_columns: list[str]
    ) -> Optional[Transaction]:
        reference = self._cell(row, self.column_mappings["reference"])
        if not reference.strip():
            logger.warning(f"Row {idx}: Missing transaction reference, skipping")
            return None

        raw_amount = self._cell(row, self.column_mappings["amount"])
        amount = self._parse_amount(raw_amount)
        if amount is None:
            logger.warning(f"Row {idx}: Invalid amount {raw_amount!r}, skipping")
            return None

        currency = self._cell(row, self.column_mappings["currency"]).strip()

        return Transaction(
            reference=reference,
            amount=amount,
            status=self._cell(row, self.column_mappings["status"]),
            currency=currency or self.base_currency,
            extra={col: self._cell(row, col) for col in extra_columns},
        )

    @staticmethod
    def _cell(row: pd.Series, column: str) -> str:
        value: Any = row.get(column)
        if value is None or pd.isna(value):
            return ""
        return str(value)

    @staticmethod
    def _parse_amount(amount_value: str) -> Optional[Decimal]:
        """
        Parse an amount cell.

        Args:
            amount_value: Raw cell text

        Returns:
            Finite Decimal amount or None
        """
        cleaned = amount_value.replace(",", "").strip()
        if not cleaned:
            return None

        try:
            amount = Decimal(cleaned)
        except InvalidOperation:
            return None

        if not amount.is_finite():
            return None
        return amount

    def get_file_summary(self, file_path: Path) -> dict:
        """
        Get summary information from a transaction CSV file.

        Args:
            file_path: Path to the CSV file

        Returns:
            Dictionary with file summary information
        """
        df = self._read_csv(file_path)
        self._validate_columns(df)
        transactions = self._process_dataframe(df)

        currency_counts: dict[str, int] = {}
        status_counts: dict[str, int] = {}
        for txn in transactions:
            currency_counts[txn.currency] = currency_counts.get(txn.currency, 0) + 1
            status_counts[txn.status] = status_counts.get(txn.status, 0) + 1

        references = [txn.reference for txn in transactions]

        return {
            "row_count": len(df),
            "valid_count": len(transactions),
            "dropped_count": len(df) - len(transactions),
            "duplicate_references": len(references) - len(set(references)),
            "columns": list(df.columns),
            "currencies": currency_counts,
            "statuses": status_counts,
        }
