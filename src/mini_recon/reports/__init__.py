"""CSV exports and Excel reports."""

from .csv_exporter import export_discrepancies, export_result, export_transactions
from .excel_generator import ExcelReportGenerator

__all__ = [
    "ExcelReportGenerator",
    "export_discrepancies",
    "export_result",
    "export_transactions",
]
