"""
Excel report generator for reconciliation results.
Creates a multi-sheet workbook with formatted output.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence
import logging

from openpyxl import Workbook
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig, SheetConfig
from ..currency.converter import get_exchange_rate_info
from ..currency.formatting import format_currency
from ..currency.rates import ExchangeRateTable
from ..models.transaction import (
    ReconciliationResult,
    ReconciliationSummary,
    Transaction,
)
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
MATCH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
VARIANCE_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

TRANSACTION_HEADERS = ["Reference", "Amount", "Currency", "Status"]


class ExcelReportGenerator:
    """Generates Excel reconciliation reports with multiple sheets."""

    def __init__(self, config: ReconConfig):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config
        self.sheet_config = config.output.sheets

    def generate_report(
        self,
        summary: ReconciliationSummary,
        result: ReconciliationResult,
        rates: ExchangeRateTable,
        output_path: Path,
    ) -> Path:
        """
        Generate the complete reconciliation report.

        Args:
            summary: Reconciliation summary
            result: Reconciliation result
            rates: Exchange rates used for the run
            output_path: Path for output file

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()

        # Remove default sheet
        if wb.active:
            wb.remove(wb.active)

        sheets = self.sheet_config
        if sheets.summary.enabled:
            self._create_summary_sheet(wb, sheets.summary, summary, result)

        if sheets.matched.enabled:
            self._create_matched_sheet(wb, sheets.matched, result, rates.base_currency)

        if sheets.internal_only.enabled:
            self._create_unmatched_sheet(
                wb, sheets.internal_only, result.internal_only, rates.base_currency
            )

        if sheets.provider_only.enabled:
            self._create_unmatched_sheet(
                wb, sheets.provider_only, result.provider_only, rates.base_currency
            )

        if sheets.discrepancies.enabled:
            self._create_discrepancy_sheet(wb, sheets.discrepancies, result)

        if sheets.exchange_rates.enabled:
            self._create_rates_sheet(wb, sheets.exchange_rates, rates)

        if not wb.sheetnames:
            raise ReportGenerationError("All report sheets are disabled")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to save report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(
        self,
        wb: Workbook,
        sheet: SheetConfig,
        summary: ReconciliationSummary,
        result: ReconciliationResult,
    ) -> None:
        """Create the summary sheet with key metrics."""
        ws = wb.create_sheet(sheet.name)

        ws["A1"] = "Transaction Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:D1")

        sections: list[tuple[str, list[tuple[str, Any]]]] = [
            (
                "File Information",
                [
                    ("Internal File:", summary.internal_filename),
                    ("Provider File:", summary.provider_filename),
                    (
                        "Reconciliation Date:",
                        summary.reconciliation_date.strftime("%Y-%m-%d %H:%M:%S"),
                    ),
                    ("Base Currency:", summary.base_currency),
                    ("Currencies Seen:", ", ".join(summary.currencies)),
                ],
            ),
            (
                "Transaction Counts",
                [
                    ("Total Internal Transactions:", summary.total_internal_transactions),
                    ("Total Provider Transactions:", summary.total_provider_transactions),
                    ("Matched:", summary.matched_count),
                    ("Internal Only:", summary.internal_only_count),
                    ("Provider Only:", summary.provider_only_count),
                    ("Discrepancies:", summary.discrepancy_count),
                    ("  Amount Mismatches:", summary.amount_discrepancy_count),
                    ("  Status Mismatches:", summary.status_discrepancy_count),
                ],
            ),
            (
                "Match Rates",
                [
                    ("Overall Match Rate:", f"{summary.match_rate:.1f}%"),
                    ("Internal Match Rate:", f"{summary.match_rate_internal:.1f}%"),
                    ("Provider Match Rate:", f"{summary.match_rate_provider:.1f}%"),
                ],
            ),
            (
                "Amounts",
                [
                    (
                        "Total Amount Variance:",
                        format_currency(summary.total_amount_variance, summary.base_currency),
                    ),
                ],
            ),
            (
                "Processing",
                [
                    ("Config File:", summary.config_file_used or "Default"),
                    ("Processing Time:", f"{summary.processing_time_seconds:.2f} seconds"),
                    ("Warnings:", summary.warning_count),
                ],
            ),
        ]

        row = 3
        for title, entries in sections:
            ws[f"A{row}"] = title
            ws[f"A{row}"].font = Font(bold=True)
            row += 1
            for label, value in entries:
                ws[f"A{row}"] = label
                ws[f"B{row}"] = value
                row += 1
            row += 1

        if result.warnings:
            ws[f"A{row}"] = "Warnings"
            ws[f"A{row}"].font = Font(bold=True)
            row += 1
            for warning in result.warnings:
                ws[f"A{row}"] = warning
                row += 1

        ws.column_dimensions["A"].width = 32
        ws.column_dimensions["B"].width = 40

    def _create_matched_sheet(
        self,
        wb: Workbook,
        sheet: SheetConfig,
        result: ReconciliationResult,
        base_currency: str,
    ) -> None:
        """Create the matched transactions sheet, flagging discrepant rows."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, TRANSACTION_HEADERS + ["Agreement"])

        discrepant = {d.reference for d in result.discrepancies}
        for row_num, txn in enumerate(result.matched, start=2):
            has_issue = txn.reference in discrepant
            row_data = self._transaction_row(txn, base_currency) + [
                "Discrepancy" if has_issue else "Agreed"
            ]
            self._write_row(ws, row_num, row_data, VARIANCE_FILL if has_issue else MATCH_FILL)

        self._auto_fit_columns(ws)

    def _create_unmatched_sheet(
        self,
        wb: Workbook,
        sheet: SheetConfig,
        transactions: Sequence[Transaction],
        base_currency: str,
    ) -> None:
        """Create an internal-only or provider-only sheet."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, TRANSACTION_HEADERS)

        for row_num, txn in enumerate(transactions, start=2):
            self._write_row(
                ws, row_num, self._transaction_row(txn, base_currency), UNMATCHED_FILL
            )

        self._auto_fit_columns(ws)

    def _create_discrepancy_sheet(
        self, wb: Workbook, sheet: SheetConfig, result: ReconciliationResult
    ) -> None:
        """Create the discrepancies sheet with normalized amounts."""
        ws = wb.create_sheet(sheet.name)
        headers = [
            "Reference",
            "Internal Amount",
            "Provider Amount",
            "Difference",
            "Internal Status",
            "Provider Status",
            "Internal Currency",
            "Provider Currency",
            "Issues",
        ]
        self._write_headers(ws, headers)

        for row_num, d in enumerate(result.discrepancies, start=2):
            row_data = [
                d.reference,
                float(round(d.internal_amount, 2)),
                float(round(d.provider_amount, 2)),
                float(round(d.amount_difference, 2)),
                d.internal_status,
                d.provider_status,
                d.internal_currency,
                d.provider_currency,
                ", ".join(d.reasons),
            ]
            self._write_row(ws, row_num, row_data, VARIANCE_FILL)

        self._auto_fit_columns(ws)

    def _create_rates_sheet(
        self, wb: Workbook, sheet: SheetConfig, rates: ExchangeRateTable
    ) -> None:
        """Create the exchange-rate reference sheet."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, ["Currency", "Rate", "Description"])

        for row_num, (code, rate) in enumerate(rates.items(), start=2):
            self._write_row(
                ws, row_num, [code, float(rate), get_exchange_rate_info(code, rates)]
            )

        generated = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        ws.cell(row=len(rates) + 3, column=1, value=f"Generated At: {generated}")
        self._auto_fit_columns(ws)

    @staticmethod
    def _transaction_row(txn: Transaction, base_currency: str) -> list[Any]:
        return [txn.reference, float(txn.amount), txn.currency or base_currency, txn.status]

    @staticmethod
    def _write_headers(ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    @staticmethod
    def _write_row(
        ws: Worksheet, row_num: int, row_data: list[Any], fill: Optional[PatternFill] = None
    ) -> None:
        for col, value in enumerate(row_data, start=1):
            cell = ws.cell(row=row_num, column=col, value=value)
            cell.border = THIN_BORDER
            if fill is not None:
                cell.fill = fill

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            column = column_cells[0].column_letter
            ws.column_dimensions[column].width = min(max_length + 2, 50)
