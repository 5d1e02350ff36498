"""Parsers for transaction export files."""

from .csv_parser import TransactionFileParser

__all__ = ["TransactionFileParser"]
