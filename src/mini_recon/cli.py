"""
Command-line interface for the mini reconciliation tool.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import ReconConfig, build_rate_table, generate_default_config, load_config
from .currency.converter import get_exchange_rate_info
from .currency.formatting import format_currency
from .matching.engine import ReconciliationEngine
from .models.transaction import ReconciliationResult, ReconciliationSummary
from .parsers.csv_parser import TransactionFileParser
from .reports.csv_exporter import export_result
from .reports.excel_generator import ExcelReportGenerator
from .utils.exceptions import ReconciliationError
from .utils.logging_config import setup_logging

console = Console()

PREVIEW_ROWS = 20


@click.group()
@click.version_option(version=__version__)
def main():
    """Reconcile internal transaction records against a provider statement."""
    pass


@main.command()
@click.argument("internal_file", type=click.Path(exists=True, path_type=Path))
@click.argument("provider_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory for CSV exports and the Excel report",
)
@click.option(
    "--amount-tolerance",
    type=float,
    default=None,
    help="Override amount tolerance in base-currency units",
)
@click.option("--excel/--no-excel", default=True, help="Write the Excel report")
@click.option("--csv/--no-csv", "write_csv", default=True, help="Write CSV exports")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option(
    "--dry-run", is_flag=True, help="Reconcile and show summary without writing files"
)
def reconcile(
    internal_file: Path,
    provider_file: Path,
    config: Optional[Path],
    output_dir: Path,
    amount_tolerance: Optional[float],
    excel: bool,
    write_csv: bool,
    verbose: bool,
    dry_run: bool,
):
    """
    Reconcile an internal export with a provider statement.

    INTERNAL_FILE: Path to the internal system CSV export
    PROVIDER_FILE: Path to the provider statement CSV
    """
    try:
        recon_config = load_config(config)
        log_level = logging.DEBUG if verbose else recon_config.logging.level
        setup_logging(log_level, log_format=recon_config.logging.format)

        if amount_tolerance is not None:
            _apply_amount_tolerance_override(recon_config, amount_tolerance)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            parser = TransactionFileParser(recon_config)

            task = progress.add_task("Parsing internal export...", total=None)
            internal_transactions = parser.parse_file(internal_file)
            progress.update(task, completed=True)

            task = progress.add_task("Parsing provider statement...", total=None)
            provider_transactions = parser.parse_file(provider_file)
            progress.update(task, completed=True)

            task = progress.add_task("Running reconciliation...", total=None)
            start_time = datetime.now()

            engine = ReconciliationEngine(recon_config)
            result = engine.reconcile(internal_transactions, provider_transactions)

            processing_time = (datetime.now() - start_time).total_seconds()
            progress.update(task, completed=True)

            summary = engine.generate_summary(
                internal_transactions=internal_transactions,
                provider_transactions=provider_transactions,
                result=result,
                internal_filename=internal_file.name,
                provider_filename=provider_file.name,
                processing_time=processing_time,
            )

        _display_summary(summary)
        _display_discrepancies(result, summary.base_currency)
        _display_warnings(result)

        if dry_run:
            console.print("\n[yellow]Dry run - no files written[/yellow]")
            return

        if write_csv:
            for path in export_result(result, output_dir, recon_config):
                console.print(f"[green]Exported: {path}[/green]")

        if excel:
            timestamp = datetime.now()
            report_name = recon_config.output.excel.filename_template.format(
                date=timestamp.strftime("%Y%m%d"),
                time=timestamp.strftime("%H%M%S"),
            )
            report_path = ExcelReportGenerator(recon_config).generate_report(
                summary=summary,
                result=result,
                rates=engine.rates,
                output_path=output_dir / report_name,
            )
            console.print(f"\n[green]Report generated: {report_path}[/green]")

    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("parse")
@click.argument("transaction_file", type=click.Path(exists=True, path_type=Path))
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def parse(transaction_file: Path, config: Optional[Path]):
    """
    Parse a transaction CSV and display its contents.

    TRANSACTION_FILE: Path to an internal or provider CSV export
    """
    try:
        recon_config = load_config(config)
        parser = TransactionFileParser(recon_config)
        transactions = parser.parse_file(transaction_file)
        file_summary = parser.get_file_summary(transaction_file)
    except ReconciliationError as e:
        console.print(f"[red]Error parsing file: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Transactions: {transaction_file.name}")
    table.add_column("Reference")
    table.add_column("Amount", justify="right")
    table.add_column("Currency")
    table.add_column("Status")

    base_currency = recon_config.currency.base_currency
    for txn in transactions[:PREVIEW_ROWS]:
        currency = txn.currency or base_currency
        table.add_row(
            txn.reference,
            format_currency(txn.amount, currency),
            currency,
            txn.status,
        )

    console.print(table)

    if len(transactions) > PREVIEW_ROWS:
        console.print(f"\n... and {len(transactions) - PREVIEW_ROWS} more transactions")

    console.print(f"\nTotal transactions: {len(transactions)}")
    if file_summary["dropped_count"]:
        console.print(
            f"[yellow]Dropped {file_summary['dropped_count']} row(s) without a "
            f"reference or numeric amount[/yellow]"
        )
    if file_summary["duplicate_references"]:
        console.print(
            f"[yellow]{file_summary['duplicate_references']} duplicate reference(s)[/yellow]"
        )


@main.command("rates")
@click.option("-c", "--config", type=click.Path(exists=True, path_type=Path))
def rates(config: Optional[Path]):
    """Show the exchange-rate table used for normalization."""
    try:
        rate_table = build_rate_table(load_config(config))
    except ReconciliationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Exchange Rates (base: {rate_table.base_currency})")
    table.add_column("Currency", style="cyan")
    table.add_column("Rate", justify="right")
    table.add_column("Description")

    for code, rate in rate_table.items():
        table.add_row(code, f"{rate}", get_exchange_rate_info(code, rate_table))

    console.print(table)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _display_summary(summary: ReconciliationSummary) -> None:
    """Display reconciliation summary in console."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Internal Transactions", str(summary.total_internal_transactions))
    table.add_row("Total Provider Transactions", str(summary.total_provider_transactions))
    table.add_row("Matched", str(summary.matched_count))
    table.add_row("Internal Only", str(summary.internal_only_count))
    table.add_row("Provider Only", str(summary.provider_only_count))
    table.add_row("Discrepancies", str(summary.discrepancy_count))
    table.add_row("Match Rate", f"{summary.match_rate:.1f}%")
    table.add_row(
        "Total Amount Variance",
        format_currency(summary.total_amount_variance, summary.base_currency),
    )
    table.add_row("Processing Time", f"{summary.processing_time_seconds:.2f}s")

    console.print(table)

    if summary.has_multiple_currencies:
        console.print(
            f"[blue]Multi-currency transactions detected - amounts converted to "
            f"{summary.base_currency} for reconciliation[/blue]"
        )


def _display_discrepancies(result: ReconciliationResult, base_currency: str) -> None:
    """Display discrepancies with normalized amounts."""
    if not result.has_discrepancies:
        return

    table = Table(title="Discrepancies")
    table.add_column("Reference")
    table.add_column("Internal Amount", justify="right")
    table.add_column("Provider Amount", justify="right")
    table.add_column("Internal Status")
    table.add_column("Provider Status")
    table.add_column("Issues", style="yellow")

    for d in result.discrepancies:
        table.add_row(
            d.reference,
            format_currency(d.internal_amount, base_currency),
            format_currency(d.provider_amount, base_currency),
            d.internal_status,
            d.provider_status,
            ", ".join(d.reasons),
        )

    console.print(table)


def _display_warnings(result: ReconciliationResult) -> None:
    for warning in result.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")


def _apply_amount_tolerance_override(config: ReconConfig, amount: float) -> None:
    """Apply amount tolerance override."""
    if amount <= 0:
        raise click.BadParameter("must be greater than zero", param_hint="--amount-tolerance")
    config.matching.amount_tolerance = amount


if __name__ == "__main__":
    main()
